"""
Unified diff output for suggested patches
"""

import logging
from pathlib import Path
from typing import Sequence, Union

from plancritic.exceptions import PlanCriticException
from plancritic.models.review_models import Patch

logger = logging.getLogger(__name__)


def format_patches(patches: Sequence[Patch]) -> str:
    """Concatenate patch diffs, each terminated by a newline"""
    return "".join(
        patch.diff_unified if patch.diff_unified.endswith("\n") else patch.diff_unified + "\n"
        for patch in patches
    )


def write_patch_file(patches: Sequence[Patch], out_path: Union[str, Path]) -> bool:
    """
    Write all patch diffs to out_path

    Returns:
        False without touching the filesystem when there are no patches
    """
    if not patches:
        logger.debug("No patches to write")
        return False

    try:
        Path(out_path).write_text(format_patches(patches), encoding="utf-8")
    except OSError as e:
        raise PlanCriticException(
            message=f"failed to write patches: {e}",
            details={"path": str(out_path)},
            original_error=e,
        )

    logger.info(f"Wrote {len(patches)} patch(es) to {out_path}")
    return True
