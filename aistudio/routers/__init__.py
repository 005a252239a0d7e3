"""
Routers module - API endpoint handlers organized by feature.

- auth: Tenant signup, login, current user
- ai_chat: Business-grounded chat and social post generation
- insights: Business insights from CRM, sales and tasks
- media: Image generation and speech/vision gateway passthrough
- nanobanana: Image editing, fusion and Gemini image health
- usage: Monthly AI usage per tenant
- diagnostics: Provider configuration providers_under_test and Ollama health
- integrations: Per-tenant Google AI Studio API key
- google_ai_studio: Google OAuth connect/callback/refresh and tenant-key image generation
- calls: AI-answered calls, FAQs and the telephony webhook
- logos: Logo generation
- websites: Website builder
- dashboard: Browser pages over the JSON API
"""
