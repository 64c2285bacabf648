"""
Document submission service package.

Submits documents to the remote registry under a strict request budget:
- Rate limiting: in-memory gate admitting N requests per window
- Submission: validation, JSON encoding, HTTP exchange and outcome
  classification for the configured endpoint variant

Structure:
- app.main: factory wiring settings, gate and submitter together.
- app.ratelimit: rate gate (asyncio and thread flavours).
- app.domain: document and result models.
- app.adapters: endpoint variants and the HTTP submitter.
"""
