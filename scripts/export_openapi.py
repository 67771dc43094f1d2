#!/usr/bin/env python3
"""Export OpenAPI spec from FastAPI application.

Writes the OpenAPI JSON document for the dashboard's client generator.
Provider keys are not needed; placeholders are used when unset.

Usage:
    python scripts/export_openapi.py
"""

import json
import os
from pathlib import Path


def main() -> None:
    """Export OpenAPI spec to openapi.json."""
    os.environ.setdefault("DEEPGRAM_API_KEY", "unset")
    os.environ.setdefault("GROQ_API_KEY", "unset")

    from agentvox.main import create_app

    output_path = Path(__file__).parent.parent / "openapi.json"
    openapi_spec = create_app().openapi()

    with open(output_path, "w") as f:
        json.dump(openapi_spec, f, indent=2)

    print(f"OpenAPI spec exported to {output_path}")
    print(f"  - Paths: {len(openapi_spec.get('paths', {}))}")
    print(f"  - Schemas: {len(openapi_spec.get('components', {}).get('schemas', {}))}")


if __name__ == "__main__":
    main()
