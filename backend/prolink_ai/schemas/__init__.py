"""
Prolink AI - Schemas
======================

    domain     User, Property, SubjectProperty (read views of platform data)
    messages   provider-neutral chat messages, sampling, completions
    results    capability envelopes and parsed results (camelCase on the wire)
    audit      AiInteraction / IntegrationLog records
    requests   HTTP request bodies
    common     error, health and language responses
"""
