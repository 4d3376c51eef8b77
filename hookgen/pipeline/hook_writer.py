"""Hook script and overlay caption generation with Gemini."""
import json
import logging
from typing import Optional

from google import genai
from google.genai import types
from pydantic import ValidationError

from hookgen.config import Settings
from hookgen.models import HookScript

logger = logging.getLogger(__name__)

HOOK_PROMPT = """Looca is a Pinterest automation tool built for food bloggers. They paste in the URL of a recipe post,
pick a couple of templates and upload a few photos of the recipe, and Looca designs new pins for that post.

Write the opening hook for a TikTok video about Looca. The video has two parts: the hook you write, which is what
viewers hear in the first seconds, and a screen recording that shows Looca in use. The hook has to keep people
watching until the screen recording starts.

Alongside the hook, write the text overlay shown on screen while it plays. The overlay is a short summary or
derivative of the hook; it does not have to match it word for word.

Examples:
Hook = I don't design my pins manually anymore like a wild animal, let me show you my new workflow.
Overlay = I don't design my pins anymore

Hook = If you're still making pins from scratch, you're wasting time. Here's how I do it.
Overlay = Stop making pins from scratch

More hooks in the styles that work:
- Curiosity: Here's how I make 20 Pinterest pins from just one blog post.
- Time saving: I used to spend 2 hours making pins... now it takes me 10 minutes.
- Audience direct: If you're a food blogger, you need to see this workflow.
- Casual: I don't even open Canva anymore. This tool creates all my pins for me.
- Before/after: Here's how I went from 3 to 20 pins a day using Looca.
- Bold: This Pinterest hack should honestly be illegal.
- Shock: This made 18 beautiful pins in 3 minutes. I'm still in shock.
- Frustration to solution: Creating pins used to stress me out. Until I tried this tool.
"""

HOOK_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "hook": types.Schema(type=types.Type.STRING),
        "overlay": types.Schema(type=types.Type.STRING),
    },
    property_ordering=["hook", "overlay"],
    required=["hook", "overlay"],
)


class HookGenerationError(RuntimeError):
    """The text model failed or returned something that is not a hook script."""


def make_client(settings: Settings) -> genai.Client:
    """Create a Gemini client from explicit settings."""
    return genai.Client(api_key=settings.gemini_api_key)


def parse_hook_response(raw: Optional[str]) -> HookScript:
    """Validate the model's JSON answer into a HookScript."""
    if not raw:
        raise HookGenerationError("Model returned an empty response")
    try:
        return HookScript(**json.loads(raw))
    except (json.JSONDecodeError, TypeError, ValidationError) as e:
        raise HookGenerationError(f"Model returned an invalid hook script: {e}") from e


async def generate_hook_script(
    settings: Settings,
    client: Optional[genai.Client] = None,
    prompt: str = HOOK_PROMPT,
) -> HookScript:
    """
    Ask Gemini for a spoken hook and its on-screen overlay.

    Args:
        settings: Model name and API key
        client: Optional pre-built client (a new one is created otherwise)
        prompt: Prompt text describing the product and the hook style

    Returns:
        HookScript with ``hook`` and ``overlay``

    Raises:
        HookGenerationError: If the API call fails or the answer is not valid JSON
    """
    config = types.GenerateContentConfig(
        response_mime_type="application/json",
        response_schema=HOOK_SCHEMA,
    )
    contents = [types.Content(role="user", parts=[types.Part(text=prompt)])]

    try:
        client = client or make_client(settings)
        response = await client.aio.models.generate_content(
            model=settings.script_model,
            contents=contents,
            config=config,
        )
    except Exception as e:
        logger.error("Hook script request failed: %s", e)
        raise HookGenerationError(f"Hook script request failed: {e}") from e

    script = parse_hook_response(response.text)
    logger.info("Generated hook: %s", script.hook)
    return script
