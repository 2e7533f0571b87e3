"""
Generation of the migration map CSV.

The :func:`write_migration_map` helper writes a CSV file listing, for every
article part created on the target store, the source article it came from.
The file is what you reach for when links or redirects have to be fixed
after a migration.
"""

from __future__ import annotations

import csv
import os
from typing import Dict, Iterable

MAP_COLUMNS = ["SourceArticleId", "Part", "TargetArticleId", "Title", "ExternalId"]


def write_migration_map(
    rows: Iterable[Dict[str, object]], *, out_path: str = "reports/migration_map.csv"
) -> str:
    """Write one CSV line per created article part.

    Parameters
    ----------
    rows:
        Iterable of dictionaries keyed by the names in :data:`MAP_COLUMNS`.
        Missing keys are written as empty cells; in a dry run
        ``TargetArticleId`` is empty.
    out_path:
        Location of the CSV file to be written.  The parent directory is
        created automatically.

    Returns
    -------
    str
        The path of the generated CSV file.
    """
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(MAP_COLUMNS)
        for row in rows:
            writer.writerow(["" if row.get(col) is None else row.get(col) for col in MAP_COLUMNS])
    return out_path
