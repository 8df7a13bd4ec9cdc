# prompt builders for every generation the server and the orchestrator make
# each returns a plain string; the provider adapters take it as a single user message

from typing import List, Optional


def _fenced(html: str) -> str:
    return f"```html\n{html}\n```"


def style_themes_prompt(user_prompt: str, count: int) -> str:
    return (
        f'Generate {count} RADICAL CONCEPTUAL STYLE THEMES for a UI component: "{user_prompt}".\n\n'
        "**STRICT IP SAFEGUARD:**\n"
        "No names of artists, brands, or copyrighted works.\n"
        "Instead, describe the *Physicality* and *Material Logic* of the UI.\n\n"
        "**CREATIVE GUIDANCE (examples only, INVENT YOUR OWN):**\n"
        '1. "Asymmetrical Primary Grid" (heavy black strokes, flat primary pigments, high-contrast white space)\n'
        '2. "Grainy Risograph Press" (overprinted translucent inks, dithered grain, raw paper substrate)\n'
        '3. "Crystalline Frost Formation" (ice-like transparency, sharp facets, frosted glass effects)\n\n'
        f"Invent {count} unique design personas based on NEW physical metaphors.\n"
        f"Return ONLY a raw JSON array of {count} strings - just the creative style names."
    )


def artifact_prompt(user_prompt: str, style_name: str, locked_style_html: Optional[str] = None) -> str:
    parts: List[str] = [
        f'You are Flash UI, a master UI/UX designer. Create a high-fidelity UI component for: "{user_prompt}".',
        f"**STYLE THEME: {style_name}**",
        "Fully embody this style theme: color palette, typography, textures, layout and "
        "micro-interactions should all follow from the material it evokes.",
    ]
    if locked_style_html:
        parts.append(
            "**STYLE REFERENCE - MATCH THIS AESTHETIC:**\n"
            f"{_fenced(locked_style_html)}\n"
            "Use the SAME visual style (colors, fonts, textures, effects) but create a DIFFERENT layout/structure."
        )
    parts.append(
        "**TECHNICAL REQUIREMENTS:**\n"
        "- Return ONLY RAW HTML with embedded CSS (no markdown fences)\n"
        "- Use modern CSS (flexbox, grid, custom properties)\n"
        "- Include hover states and transitions"
    )
    return "\n\n".join(parts)


def similar_styles_prompt(source_html: str, count: int) -> str:
    return (
        f"Analyze this HTML design and generate {count} creative variations of its visual style.\n\n"
        f"SOURCE DESIGN:\n{_fenced(source_html)}\n\n"
        f"Generate {count} distinct style names that are similar in spirit but with interesting variations.\n"
        f"Return ONLY a raw JSON array of {count} creative style names."
    )


def similar_artifact_prompt(source_html: str, original_prompt: str, variation: str) -> str:
    return (
        f'You are Flash UI. Create a design SIMILAR to the reference but with this variation: "{variation}".\n\n'
        f"REFERENCE DESIGN (match the overall aesthetic and quality):\n{_fenced(source_html)}\n\n"
        f'ORIGINAL PROMPT: "{original_prompt}"\n\n'
        "Keep the same visual language and component type; the layout may change.\n"
        "Return ONLY RAW HTML. No markdown fences."
    )


def blend_prompt(html_a: str, html_b: str, original_prompt: str, ratio_a: int, ratio_b: int) -> str:
    return (
        "You are Flash UI. Blend two design styles into a cohesive hybrid.\n\n"
        f"STYLE A ({ratio_a}% influence):\n{_fenced(html_a)}\n\n"
        f"STYLE B ({ratio_b}% influence):\n{_fenced(html_b)}\n\n"
        f'ORIGINAL PROMPT: "{original_prompt}"\n\n'
        f"Take {ratio_a}% of the visual influence from Style A and {ratio_b}% from Style B, "
        "and create something new that honors both sources.\n"
        "Return ONLY RAW HTML. No markdown fences."
    )


def variations_prompt(user_prompt: str) -> str:
    """Server-side wrapper for /variations: asks for one {name, html} JSON object per line."""
    return (
        f'You are a master UI/UX designer. Generate RADICAL VARIATIONS of: "{user_prompt}".\n\n'
        "No names of artists. Describe the physicality and material logic of each UI instead.\n\n"
        "For EACH variation invent a unique persona name and generate high-fidelity HTML/CSS.\n\n"
        "Required JSON Output Format (stream ONE object per line):\n"
        '{ "name": "Persona Name", "html": "..." }'
    )


def ux_variations_prompt(base_prompt: str, style_name: str, style_html: str, count: int = 5) -> str:
    return (
        f'{count} RADICAL UX VARIATIONS for the same user goal as: "{base_prompt}".\n\n'
        f"Keep the visual style of this STYLE REFERENCE ({style_name}) constant:\n{_fenced(style_html)}\n\n"
        "Change the information architecture, interaction pattern and user flow, not the look. "
        "Name each variation after its UX approach."
    )


def word_suggestions_prompt(full_prompt: str, word: str, style_locked: bool) -> str:
    if style_locked:
        task = (
            "Generate 5 alternative SINGLE-WORD replacements for the selected word that would change the "
            'UX approach (e.g. "wizard", "timeline", "kanban", "stepper"), not the visual style.'
        )
    else:
        task = (
            "Generate 5 alternative SINGLE-WORD replacements that would change the VISUAL FEEL of the "
            "design (materials, moods, visual styles) without changing its functionality."
        )
    return (
        f'FULL PROMPT:\n"{full_prompt}"\n\n'
        f'SELECTED WORD:\n"{word}"\n\n'
        f"TASK:\n{task}\n\n"
        "Return ONLY a raw JSON array of 5 strings."
    )
