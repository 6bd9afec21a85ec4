"""Write the registry's OpenAPI document to ``docs/openapi.json`` (or the path given)."""

from __future__ import annotations

import json
import sys
from pathlib import Path

from proposal_registry.main import create_application

DEFAULT_DESTINATION = Path("docs/openapi.json")


def main(destination: Path = DEFAULT_DESTINATION) -> None:
    document = create_application().openapi()
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(json.dumps(document, indent=2), encoding="utf-8")
    print(f"{len(document['paths'])} paths written to {destination}")


if __name__ == "__main__":
    main(Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_DESTINATION)
