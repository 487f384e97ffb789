# Supabase tables: webhook_delivery_logs, webhook_subscriptions, comunicacoes
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

webhook_delivery_logs (one row per delivery attempt):
- id: uuid (primary key)
- subscription_id: uuid (nullable, foreign key to webhook_subscriptions.id)
- status_code: integer (nullable) - absent when no response was received
- success: boolean (nullable) - absent when no response was received
- attempt: integer (not null, >= 1)
- error_message: text (nullable)
- request_body: jsonb (not null)
- response_body: text (nullable)
- dispatched_at: timestamptz (default: now())

webhook_subscriptions:
- id: uuid (primary key)
- endpoint_url: text (not null)
- secret: text (nullable) - when set, deliveries carry X-Webhook-Signature
- topic: text (not null) - event topic, or "generic" for every topic
- enabled: boolean (default: true)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

comunicacoes (outbound e-mail / WhatsApp / SMS messages):
- id: uuid (primary key)
- event_type: text (not null)
- user_action: text (not null)
- canal: text ("whatsapp" | "email" | "sms")
- destinatario: text (not null)
- conteudo: text (not null)
- assunto: text (nullable)
- status: text ("enviado" | "erro" | "pendente")
- external_id: text (nullable) - provider message id
- metadata: jsonb (nullable)
- created_at: timestamptz (default: now())
- created_by: uuid (nullable)
"""
