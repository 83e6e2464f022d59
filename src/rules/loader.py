import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from src.rules.models import ModalRules

RULES_PATH_ENV = "MODAL_RULES_PATH"
DEFAULT_RULES_PATH = Path(__file__).resolve().parents[2] / "rules.yaml"


def default_rules_path() -> Path:
    return Path(os.environ.get(RULES_PATH_ENV, str(DEFAULT_RULES_PATH)))


def _extract_yaml(content: str) -> str:
    """Return the first ```yaml fenced block, or the whole text if there is none."""
    yaml_lines: list[str] = []
    in_block = False
    found_block = False

    for line in content.splitlines():
        stripped = line.strip()
        if stripped.startswith("```yaml"):
            in_block = True
            found_block = True
            continue
        if in_block and stripped.startswith("```"):
            break
        if in_block:
            yaml_lines.append(line)

    return "\n".join(yaml_lines) if found_block else content


def parse_rules(content: str) -> ModalRules:
    """
    Parse and validate rules text.
    Raises ValueError on bad YAML or a schema mismatch.
    """
    try:
        data = yaml.safe_load(_extract_yaml(content))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    try:
        return ModalRules.model_validate(data or {})
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e


def load_rules(path: Path | None = None) -> ModalRules:
    """
    Load and validate the rules file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if the file is not valid.
    """
    path = path or default_rules_path()
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    with open(path) as f:
        return parse_rules(f.read())
