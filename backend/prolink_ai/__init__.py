"""
Prolink AI - Application Package
==================================

AI capability layer for the Prolink real-estate platform: chatbot, property
recommendations, price prediction, market analysis, translation and image
analysis, each audited to the database.

Layers:
    routes/     FastAPI endpoints under /api/ai (thin; return envelopes)
    services/   AIService orchestrators, provider gateway, prompts, parsing,
                repositories and audit stores
    schemas/    pydantic models (domain views, messages, envelopes, audit)
    models/     SQLAlchemy ORM tables
"""

__version__ = "1.0.0"
