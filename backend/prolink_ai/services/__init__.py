# Services package init
"""
Prolink AI - Services Layer
=============================

Service Inventory:
    - ai_service:          AIService (six capabilities) and build_ai_service()
    - gateway:             ProviderGateway, the single door to external providers
    - llm_base:            CompletionProvider / TranslationProvider interfaces
    - openai_service:      OpenAI chat + vision provider (default)
    - gemini_service:      Google Gemini chat + vision provider
    - translate_service:   Google Cloud Translation provider
    - retry:               pluggable retry policies (single attempt by default)
    - prompt_builder:      pure prompt construction
    - response_parser:     best-effort parsing of model text
    - property_queries:    query documents and aggregation pipelines
    - repositories:        user / property lookups (SQL implementation)
    - stores:              audit record persistence (SQL implementation)
    - interaction_logger:  audit writes that never fail the caller
"""
