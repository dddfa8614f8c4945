"""
Open-FEA Parts: Symmetry Propagator
===================================

Replicates a primary member surface across the parent shape's symmetry
copies. Each copy is derived from the previous copy, not the primary, so
the parent's step transforms chain exactly as the parent's own copies do.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from .shapes import ParentShape
from .surfaces import ParametricSurface

logger = logging.getLogger(__name__)


def propagate(primary: ParametricSurface, transforms: Sequence[np.ndarray],
              parent_flip_flags: Sequence[bool]) -> List[ParametricSurface]:
    """
    Build one surface per symmetry copy.

    Args:
        primary: Copy 0, returned unmodified as entry 0
        transforms: Step transforms; entry i maps copy i-1 onto copy i
        parent_flip_flags: Normal-flip state of the parent's copy i

    Returns:
        List with len(transforms) surfaces
    """
    result = [primary]
    for i in range(1, len(transforms)):
        surf = result[i - 1].copy()
        surf.transform(transforms[i])
        if surf.flip_normal != parent_flip_flags[i]:
            surf.flip()
        result.append(surf)
    return result


def parent_flip_flags(shape: ParentShape, main_index: int) -> List[bool]:
    surfaces = shape.surfaces()
    return [surfaces[i].flip_normal for i in shape.symmetry_indices(main_index)]


def propagate_in_place(surfaces: List[Optional[ParametricSurface]],
                       shape: Optional[ParentShape], main_index: int,
                       block_start: int = 0) -> None:
    """
    Refresh copies 1..n-1 of one block of a part's surface list.

    Blocks are laid out consecutively (arrays hold one block per member).
    Missing parents and empty lists are left untouched.
    """
    if shape is None or not surfaces:
        return
    transforms = shape.symmetry_transforms()
    n = len(transforms)
    primary = surfaces[block_start] if block_start < len(surfaces) else None
    if primary is None or block_start + n > len(surfaces):
        logger.debug("Symmetry block %d not sized for %d copies", block_start, n)
        return
    surfaces[block_start:block_start + n] = propagate(
        primary, transforms, parent_flip_flags(shape, main_index)
    )
