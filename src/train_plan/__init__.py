"""
train_plan — AI Teacher Training Plan Generator
===============================================
Package containing the prompt builder, Gemini client, markdown normalizer,
PDF exporter, draft store and the generation controller that ties them
together for the Streamlit app and the terminal demo.

Module map
----------
  models.py               Request dataclasses, subject catalogue, quick
                          templates, Gemini envelope (Pydantic) models.
  config.py               Settings loaded from .env; live / mock detection.
  errors.py               PlanError hierarchy (Validation, Upstream,
                          MalformedResponse, Export).
  guardrails.py           Request validation + output advisories.
  plan_store.py           Single-slot SQLite draft store.

  b0_prompt_builder.py    Block 0: PlanRequest → instruction string.
  b1_gemini_client.py     Block 1: async Gemini generateContent client.
  b1_mock_generator.py    Block 1 (mock): rule-based markdown plan.
  b2_normalizer.py        Block 2: HTML → markdown, bold spans, word wrap.
  b3_pdf_exporter.py      Block 3: pagination + reportlab rendering.
  generation.py           Submission boundary: single-flight, epoch guard.

Pipeline order
--------------
  GuardrailsPipeline.check_request → b0 build_prompt → b1 generate
  → b2 canonicalize_plan → PlanStore.set → GuardrailsPipeline.check_plan
  ** user: copy / download **
  → b2 normalize_plan → b3 paginate → b3 render_pdf
"""
__version__ = "0.1.0"
