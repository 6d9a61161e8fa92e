"""
Deposit checkpoint persistence

Durably records the highest logical time (lt) the deposit monitor has
processed, as a single decimal integer in a plain-text file.
"""

import logging
import os
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


class CheckpointStore:
    """File-backed store for the last processed lt"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> int:
        """
        Read the stored checkpoint.

        Returns 0 when no checkpoint was ever written or the file cannot be
        read or parsed, so a fresh install starts from the beginning of the
        address history.
        """
        try:
            raw = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            logger.info(f"No checkpoint at {self.path} - starting from lt=0")
            return 0
        except OSError as e:
            logger.warning(f"⚠️ CHECKPOINT_READ_FAILED: {self.path}: {e} - starting from lt=0")
            return 0

        if not raw:
            return 0

        try:
            lt = int(raw)
        except ValueError:
            logger.warning(f"⚠️ CHECKPOINT_CORRUPT: {self.path} holds {raw[:40]!r} - starting from lt=0")
            return 0

        if lt < 0:
            logger.warning(f"⚠️ CHECKPOINT_CORRUPT: negative lt {lt} in {self.path} - starting from lt=0")
            return 0

        logger.info(f"Loaded deposit checkpoint lt={lt}")
        return lt

    def save(self, lt: int) -> bool:
        """
        Persist the checkpoint.

        Writes a sibling temp file and renames it over the target, so readers
        see either the old or the new value. Failures are logged and reported
        through the return value, never raised.
        """
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as fh:
                fh.write(str(lt))
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
            return True
        except OSError as e:
            logger.error(f"❌ CHECKPOINT_SAVE_FAILED: lt={lt} path={self.path}: {e}")
            try:
                tmp_path.unlink()
            except OSError:
                pass
            return False
