"""
Visual styles and the prompt-expansion instruction.

Users pick a style name; the expansion instruction carries a one-line
directive for it so the text model steers lighting and composition.
"""

STYLE_DIRECTIVES = {
    "Noir Horror": (
        "High-contrast black and white, hard key light, deep shadows, rain-slick "
        "streets and smoke, 1940s film grain"
    ),
    "Found Footage": (
        "Handheld consumer camcorder look, night-vision tint or harsh on-camera "
        "flash, motion blur, timestamp overlay, claustrophobic framing"
    ),
    "Junji Ito Manga": (
        "Detailed black ink linework, obsessive spirals and cross-hatching, "
        "uncanny stillness, monochrome manga panel composition"
    ),
    "Psychological/Surreal Horror": (
        "Dreamlike impossible architecture, surreal distortions, muted desaturated "
        "palette, unsettling symmetry, soft diffused light"
    ),
    "Cinematic": (
        "Anamorphic widescreen framing, motivated practical lighting, shallow "
        "depth of field, rich teal and amber color grade"
    ),
    "Anime": (
        "Clean cel-shaded anime illustration, expressive lighting, painterly "
        "backgrounds, vivid saturated colors"
    ),
    "Watercolor": (
        "Loose watercolor washes on textured paper, soft bleeding edges, "
        "luminous transparent layers, gentle palette"
    ),
    "Photorealistic": (
        "Natural light, realistic textures and materials, 35mm lens, true-to-life "
        "color, sharp focus on the subject"
    ),
}

GENERIC_DIRECTIVE = (
    "Cohesive art direction, deliberate lighting, strong cinematic composition"
)

SAFETY_GUIDELINES = """Safety Guidelines (CRITICAL):
- Strictly avoid any terms related to: biological trauma, graphic violence, medical procedures, excessive gore, or explicit anatomical details.
- Use artistic metaphors (e.g., "surreal distortions", "ethereal melting", "obsessive patterns") instead of literal scary or graphic words.
- Focus on: lighting, atmospheric dread, and cinematic composition.
- The directive must be evocative but "PG-13" in its vocabulary to pass safety filters."""


def list_styles() -> list[str]:
    """Return the names of the built-in styles."""
    return list(STYLE_DIRECTIVES)


def get_directive(style: str) -> str:
    """Return the directive for a style, matching names case-insensitively."""
    lookup = {name.lower(): directive for name, directive in STYLE_DIRECTIVES.items()}
    return lookup.get(style.strip().lower(), GENERIC_DIRECTIVE)


def build_expansion_instruction(sentence: str, style: str) -> str:
    """Build the text-model instruction that expands a sentence into a prompt."""
    parts = [
        "Based on the following sentence, create a highly detailed visual directive "
        "for an AI image generator.",
        f'Visual style: "{style}".',
        f"Style direction: {get_directive(style)}.",
        SAFETY_GUIDELINES,
        "Output a single descriptive paragraph. No intro.",
        f'Sentence: "{sentence}"',
    ]
    return "\n".join(parts)
