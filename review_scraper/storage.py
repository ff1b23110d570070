import json
from pathlib import Path
from typing import Iterable, Union

from .models import Review
from .resolver import slugify


def output_path(source: str, company: str, start_date: str, end_date: str,
                base_dir: Union[str, Path] = "output") -> Path:
    """output/<source>/<source>_<company_slug>_<start>_<end>_reviews.json

    The parent directory is created if it is missing.
    """
    directory = Path(base_dir) / source
    directory.mkdir(parents=True, exist_ok=True)
    return directory / f"{source}_{slugify(company, '_')}_{start_date}_{end_date}_reviews.json"


def write_reviews(path: Union[str, Path], reviews: Iterable[Review]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([r.to_json_dict() for r in reviews], f, indent=2, ensure_ascii=False)
    return path
