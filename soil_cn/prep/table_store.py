"""
File-backed store for prepared tables, keyed by logical table name.

Tables are pickled, which keeps dtypes intact, including categorical
columns with their full category sets.
"""

import os
import pickle
import re
import tempfile
import pandas as pd
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from ..errors import TableNotFoundError

_VALID_KEY = re.compile(r'^[A-Za-z0-9_-]+$')


class TableStore:
    """
    Save and load named tables under a directory, one pickle file per key.

    Parameters
    ----------
    root_dir : str or Path
        Directory holding the table files; created on first save
    """

    suffix = '.pkl'

    def __init__(self, root_dir: Union[str, Path]):
        self.root_dir = Path(root_dir)

    def __repr__(self):
        return f"TableStore({str(self.root_dir)!r})"

    def path_for(self, key: str) -> Path:
        if not isinstance(key, str) or not _VALID_KEY.match(key):
            raise ValueError(f"Invalid table key {key!r}: use letters, digits, '_' or '-'")
        return self.root_dir / f"{key}{self.suffix}"

    def _stage(self, table: pd.DataFrame) -> str:
        """Pickle table to a temporary file in root_dir and return its name."""
        self.root_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.root_dir, suffix='.tmp')
        try:
            with os.fdopen(fd, 'wb') as f:
                pickle.dump(table, f, protocol=pickle.HIGHEST_PROTOCOL)
        except BaseException:
            os.remove(tmp_name)
            raise
        return tmp_name

    def save(self, table: pd.DataFrame, key: str) -> Path:
        """
        Store table under key, replacing any table already saved there.

        The file is written to a temporary name and then moved into place,
        so an interrupted save never leaves a truncated table behind.
        """
        return self.save_all({key: table})[key]

    def save_all(self, tables: Mapping[str, Optional[pd.DataFrame]]) -> Dict[str, Path]:
        """
        Replace a set of tables together.

        Every table is pickled to a temporary file first; files are moved
        into place only once all of them were written. A key mapped to None
        is removed from the store, so no table from an earlier run is left
        beside the new set.

        Returns
        -------
        dict
            key -> path of every table written
        """
        paths = {key: self.path_for(key) for key in tables}

        staged = {}
        try:
            for key, table in tables.items():
                if table is not None:
                    staged[key] = self._stage(table)
        except BaseException:
            for tmp_name in staged.values():
                os.remove(tmp_name)
            raise

        for key, tmp_name in staged.items():
            os.replace(tmp_name, paths[key])
        for key, table in tables.items():
            if table is None:
                self.delete(key)

        return {key: paths[key] for key in staged}

    def delete(self, key: str) -> bool:
        """Remove the table saved under key. Returns False if there was none."""
        path = self.path_for(key)
        if not path.exists():
            return False
        path.unlink()
        return True

    def load(self, key: str) -> pd.DataFrame:
        """Load the table saved under key; TableNotFoundError if there is none."""
        path = self.path_for(key)
        if not path.exists():
            raise TableNotFoundError(key, self.root_dir)

        with open(path, 'rb') as f:
            return pickle.load(f)

    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()

    def keys(self) -> List[str]:
        """Keys of all saved tables, sorted."""
        if not self.root_dir.exists():
            return []
        return sorted(p.stem for p in self.root_dir.glob(f"*{self.suffix}"))
