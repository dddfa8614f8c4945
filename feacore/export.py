"""
Open-FEA Parts: Exporters
=========================

- DXF: one 3D polyline per generated surface outline, one layer per part (ezdxf)
- STEP: planar member faces as a compound (cadquery, optional)
- Solver cards: NASTRAN or Calculix property and material records
"""

import logging
import re
from pathlib import Path
from typing import Any, List, Optional, Union

import ezdxf
import numpy as np

from config import SolverDialect, config
from .parts import ElementMode, PartType, StructuralPart
from .structure import Structure
from .surfaces import ParametricSurface, PlanarSurface

logger = logging.getLogger(__name__)


def _try_import_cadquery() -> Optional[Any]:
    """Load CadQuery if the 'cad' extra is installed."""
    try:
        import cadquery as cq
        return cq
    except ImportError:
        logger.warning("CadQuery not found; STEP export unavailable. Install the 'cad' extra.")
        return None


def surface_outline(surf: ParametricSurface, per_unit: Optional[int] = None) -> np.ndarray:
    """Closed (N, 3) boundary loop: w=0, u=u_max, w=w_max, u=0."""
    if isinstance(surf, PlanarSurface):
        a, b, c, d = surf.corners()
        return np.array([a, b, d, c, a])

    per_unit = per_unit or config.sampling.outline_samples
    nu = max(int(np.ceil(surf.u_max * per_unit)), 1) + 1
    nw = max(int(np.ceil(surf.w_max * per_unit)), 1) + 1
    us = np.linspace(0.0, surf.u_max, nu)
    ws = np.linspace(0.0, surf.w_max, nw)
    loop = ([surf.evaluate(u, 0.0) for u in us]
            + [surf.evaluate(surf.u_max, w) for w in ws[1:]]
            + [surf.evaluate(u, surf.w_max) for u in us[::-1][1:]]
            + [surf.evaluate(0.0, w) for w in ws[::-1][1:]])
    return np.array(loop)


def _layer_name(part: StructuralPart) -> str:
    return f"{config.export.dxf_layer_prefix}_{re.sub(r'[^A-Za-z0-9_-]', '_', part.name)}"


def write_dxf(structure: Structure, path: Union[Path, str],
              include_hidden: bool = False) -> Path:
    """Write member outlines to a 3D DXF. Parts with draw=False are skipped unless include_hidden."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    doc = ezdxf.new()
    msp = doc.modelspace()
    count = 0
    for part in structure.parts:
        if not (part.draw or include_hidden):
            continue
        surfaces = [s for s in part.surfaces if s is not None]
        if not surfaces:
            continue
        layer = _layer_name(part)
        if layer not in doc.layers:
            doc.layers.add(layer)
        for surf in surfaces:
            points = [tuple(float(v) for v in p) for p in surface_outline(surf)]
            msp.add_polyline3d(points, dxfattribs={"layer": layer})
            count += 1

    doc.saveas(path)
    logger.info("Wrote %d outlines to %s", count, path)
    return path


def export_step(structure: Structure, path: Union[Path, str]) -> Optional[Path]:
    """Planar member faces to STEP. Returns None without CadQuery or planar faces."""
    cq = _try_import_cadquery()
    if cq is None:
        return None

    faces = []
    for part in structure.parts:
        for surf in part.surfaces:
            if not isinstance(surf, PlanarSurface):
                continue
            loop = [cq.Vector(*(float(v) for v in p)) for p in surface_outline(surf)]
            faces.append(cq.Face.makeFromWires(cq.Wire.makePolygon(loop)))

    if not faces:
        logger.warning("No planar member surfaces to export for %s", structure.name)
        return None

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    compound = cq.Compound.makeCompound(faces)
    cq.exporters.export(cq.Workplane("XY").add(compound), str(path))
    logger.info("Wrote %d faces to %s", len(faces), path)
    return path


def _elset(part: StructuralPart, suffix: str = "") -> str:
    return re.sub(r"[^A-Za-z0-9_]", "_", f"E{part.name}{suffix}").upper()


def nastran_cards(structure: Structure) -> List[str]:
    lib = structure.properties
    lines = [f"$ Structure: {structure.name}", "$ Materials"]
    lines += [m.nastran_card(i + 1) for i, m in enumerate(lib.materials)]
    lines.append("$ Properties")
    lines += [p.nastran_card(i + 1) for i, p in enumerate(lib.properties)]
    lines.append("$ Part assignments")
    for part in structure.parts:
        if part.part_type is PartType.FIX_POINT:
            continue
        lines.append(f"$ {part.name}: property {part.property_index + 1}")
        if part.element_mode is ElementMode.SHELL_AND_BEAM:
            lines.append(f"$ {part.name} caps: property {part.cap_property_index + 1}")
    return lines


def calculix_cards(structure: Structure) -> List[str]:
    lib = structure.properties
    lines = [f"** Structure: {structure.name}"]
    lines += [m.calculix_block() for m in lib.materials]

    for part in structure.parts:
        if part.part_type is PartType.FIX_POINT:
            continue
        assignments = [(part.property_index, _elset(part))]
        if part.element_mode is ElementMode.SHELL_AND_BEAM:
            assignments.append((part.cap_property_index, _elset(part, "_CAP")))
        for index, elset in assignments:
            prop = lib.get_property(index)
            material = lib.get_material(prop.material_index) if prop else None
            if prop is None or material is None:
                logger.warning("%s: property %d has no valid material; skipped", part.name, index)
                continue
            lines.append(prop.calculix_block(elset, material))
    return lines


def write_solver_cards(structure: Structure, path: Union[Path, str],
                       dialect: Optional[SolverDialect] = None) -> Path:
    """Write property/material records in the requested solver dialect."""
    dialect = SolverDialect(dialect or config.export.default_dialect)
    lines = nastran_cards(structure) if dialect is SolverDialect.NASTRAN else calculix_cards(structure)

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n")
    logger.info("Wrote %s cards to %s", dialect.value, path)
    return path
