"""README text bundled into packaged archives."""

from typing import Iterable

from welder.config import PackConfig

README_TEMPLATE = """# {name}

{byline}

- Version: {semver}
- License: {license}
- Sprites: {sprite_count}
- Resolutions: {resolutions}

## Contents

{layout}
"""


def render_readme(
    pack: PackConfig,
    factors: Iterable[int],
    sprite_count: int,
    include_previews: bool = False,
) -> str:
    """Render the archive README from pack metadata."""
    factors = list(factors)
    credits = [part for part in (pack.author, pack.brand) if part]
    byline = "By " + " / ".join(credits) + "." if credits else "Pixel art asset pack."

    layout = [f"- `exports/{f}x/` - sprites scaled {f}x (nearest neighbor)" for f in factors]
    if include_previews:
        layout.append("- `previews/` - sheet and grid preview images")

    return README_TEMPLATE.format(
        name=pack.name,
        byline=byline,
        semver=pack.semver,
        license=pack.license,
        sprite_count=sprite_count,
        resolutions=", ".join(f"{f}x" for f in factors),
        layout="\n".join(layout),
    )
