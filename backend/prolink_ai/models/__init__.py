# Models package init
"""
Prolink AI - ORM Models
=========================

    interaction.AiInteraction       ai_interactions (audit, insert-only)
    integration_log.IntegrationLog  integration_logs (audit, insert-only)
    listing.User / listing.Property users / properties (read-only mappings)
"""
