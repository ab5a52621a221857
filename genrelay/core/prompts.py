from __future__ import annotations

from .types import ImageRef

SORA_SYSTEM_PROMPT = """
You are an expert prompt engineer for Sora AI (video generation).
Convert the user's request into a single Sora-ready VIDEO prompt.

Rules:
- Output must be directly usable in Sora
- Use Scene 1, Scene 2, Scene 3, Scene 4
- Include: aspect ratio, camera, lighting, mood, motion
- Do NOT use OBJECTIVE/INPUTS/CONSTRAINTS/CHECKLIST format
- Write in English (best for Sora)
""".strip()

PRODUCT_VISION_SYSTEM_PROMPT = """
You are an expert product visual analyst for advertising.
Describe ONLY what you see in the product image so it can be recreated faithfully.

Return a compact bullet list:
- product type
- key shape / silhouette
- main colors
- materials / textures
- patterns / prints (if any)
- any important details that must remain consistent

Write in English. No extra commentary.
""".strip()

PRODUCT_VISION_USER_PROMPT = "Analyze the product image for faithful recreation."


def sora_user_prompt(sora_prompt: str, img1: ImageRef | None, img2: ImageRef | None) -> str:
    return f"""
User request (source prompt):
---
{sora_prompt}
---

Uploaded refs (not required to analyze):
- img1: {img1.original_name if img1 else "none"}
- img2: {img2.original_name if img2 else "none"}

Generate the final Sora-ready video prompt.
""".strip()


def vertical_ad_prompt(product_description: str, instructions: str) -> str:
    reference = product_description or (
        "Use the attached reference image as the product; keep it faithful."
    )
    return f"""
Create ONE high-quality vertical promotional image (9:16) suitable for TikTok.

REFERENCE PRODUCT (must remain consistent):
{reference}

USER INSTRUCTIONS (follow closely):
{instructions}

Composition:
- vertical 9:16 ad composition
- product is hero, ~60-70% of frame
- clean premium background, cinematic lighting, shallow depth of field
- remove any watermarks/logos/text from the reference; generate a new scene

Text overlay rules:
- Thai only, formal spelling, no English characters
- if unsure spelling, use a clean solid graphic bar instead of text

Output: single image, commercial-grade quality.
""".strip()
