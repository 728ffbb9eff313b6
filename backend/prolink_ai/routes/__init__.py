# Routes package init
"""
Prolink AI - API Routes Package
=================================

Route Inventory:
    - ai.py:      POST /api/ai/{chat, recommendations, price-prediction,
                  market-analysis, translate, image-analysis}
                  GET  /api/ai/languages
    - health.py:  GET  /api/ai/health

Routes stay thin: validate the body, call AIService, return its envelope.
"""
