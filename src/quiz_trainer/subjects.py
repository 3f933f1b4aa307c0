"""Load the subject catalog and question banks from the content directory."""
import json
import logging
import os
from pathlib import Path

from quiz_trainer.models import Question, Subject
from quiz_trainer.variants import DEFAULT_QUESTIONS_PER_VARIANT

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(os.environ.get("QUIZ_TRAINER_CONTENT", Path(__file__).parent / "content"))
CATALOG_FILE = "subjects.json"


def read_bank_file(path: Path):
    suffix = path.suffix.lower()
    if suffix == ".json":
        return json.loads(path.read_text(encoding="utf-8"))
    elif suffix in (".yaml", ".yml"):
        import yaml
        try:
            return yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path.name}: {e}") from e
    raise ValueError(f"Unsupported question bank format: {path.name}")


def parse_questions(entries: list, source: str = "") -> tuple:
    """Parse bank entries into Questions, skipping malformed ones."""
    questions = []
    for i, entry in enumerate(entries):
        try:
            questions.append(Question.from_dict(entry))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed question %d in %s: %s", i, source, e)
    return tuple(questions)


def load_subjects(content_dir: Path | str | None = None) -> list[Subject]:
    content_dir = Path(content_dir) if content_dir else CONTENT_DIR
    catalog_path = content_dir / CATALOG_FILE
    if not catalog_path.exists():
        raise FileNotFoundError(f"Subject catalog not found: {catalog_path}")
    catalog = json.loads(catalog_path.read_text(encoding="utf-8"))

    subjects = []
    for entry in catalog["subjects"]:
        bank_path = content_dir / entry["file"]
        try:
            entries = read_bank_file(bank_path)
        except (OSError, ValueError) as e:
            logger.warning("Skipping subject %s: %s", entry.get("id"), e)
            continue
        subjects.append(Subject(
            id=entry["id"],
            name=entry["name"],
            short_name=entry.get("shortName", entry["name"]),
            data=parse_questions(entries or [], bank_path.name),
            has_variants=bool(entry.get("hasVariants", False)),
            questions_per_variant=int(entry.get("questionsPerVariant", DEFAULT_QUESTIONS_PER_VARIANT)),
            color=entry.get("color", ""),
        ))
    return subjects


def get_subject_by_id(subjects: list[Subject], subject_id: str) -> Subject:
    for subject in subjects:
        if subject.id == subject_id:
            return subject
    raise KeyError(subject_id)
