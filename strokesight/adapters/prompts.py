"""Prompt templates for the vision enrichment model."""

from __future__ import annotations

ENRICH_PROMPT = """You are StrokeSight's sketch analyst. You will see a hand-drawn sketch made of pen strokes.

{hint}{context}

Identify the objects in the drawing and break each into its visible components
(e.g. a person has a head, body, arms, legs). For every object or component,
estimate where its center sits and how large it is, as fractions of the image
(0-1, x from left to right, y from top to bottom).

Respond with JSON only, in this exact format:

```json
{{
  "description": "one sentence describing the whole drawing",
  "objects": [
    {{
      "name": "head",
      "category": "human",
      "x": 0.5,
      "y": 0.2,
      "width": 0.15,
      "height": 0.15,
      "confidence": 0.8
    }}
  ]
}}
```

category is one of: human, animal, building, nature, geometric, abstract, object.
Omit width/height if you cannot estimate them. Be concise."""


def build_enrich_prompt(context: str, current_names: list[str]) -> str:
    hint = ""
    if current_names:
        hint = f"Our geometric recognizer suggests: {', '.join(current_names[:8])}.\n"
    ctx = f'The user says it is supposed to be: "{context.strip()[:500]}".' if context.strip() else ""
    return ENRICH_PROMPT.format(hint=hint, context=ctx)
