#!/usr/bin/env python3
"""
Open-FEA Parts: Main Entry Point
================================

Usage:
    python main.py --summary                  Build and summarize the demo structures
    python main.py --validate                 Validate configuration only
    python main.py --export-json out/s.json   Save the wing structure definition
    python main.py --export-dxf out/s.dxf     Member outlines for both structures
    python main.py --solver-cards out/s.inp --dialect calculix

"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Tuple

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from config import SolverDialect, config  # noqa: E402
from feacore import (  # noqa: E402
    BodyGeom,
    PartType,
    ShapeRegistry,
    Structure,
    SubSurfaceType,
    SymmetryPlane,
    WingGeom,
)
from feacore.export import export_step, write_dxf, write_solver_cards  # noqa: E402
from feacore.parts import PERP_LEADING_EDGE  # noqa: E402
from feacore.persistence import load_structure, save_structure  # noqa: E402
from feacore.planar import OrientationPlane, OrientationSpec  # noqa: E402

logger = logging.getLogger("open_fea_parts")

DEMO_WING_ID = "DEMOWING01"
DEMO_BODY_ID = "DEMOBODY01"


def validate_config() -> bool:
    """Validate structure configuration."""
    print("Validating configuration...")
    errors = config.validate()

    if errors:
        print("\nCONFIGURATION ERRORS:")
        for err in errors:
            print(f"  [!] {err}")
        return False

    print("  Configuration valid.")
    return True


def build_demo_shapes() -> ShapeRegistry:
    """A two-panel swept wing mirrored about XZ and a plain fuselage."""
    wing = WingGeom.tapered(
        "main_wing",
        semi_span=6.0,
        root_chord=2.0,
        tip_chord=1.0,
        sweep_angle=15.0,
        dihedral_angle=3.0,
        n_sections=3,
        shape_id=DEMO_WING_ID,
        position=(4.0, 0.0, 0.0),
    )
    body = BodyGeom.ellipsoidal(
        "fuselage", length=10.0, width=1.4, height=1.6,
        symmetry=SymmetryPlane.NONE, shape_id=DEMO_BODY_ID,
    )
    return ShapeRegistry([wing, body])


def build_wing_structure(shapes: ShapeRegistry) -> Structure:
    structure = Structure(DEMO_WING_ID, name="WingBox")
    structure.init_skin(shapes)

    front = structure.add_part(PartType.SPAR)
    front.placement.set_relative(0.25)
    rear = structure.add_part(PartType.SPAR)
    rear.placement.set_relative(0.7)

    root_rib = structure.add_part(PartType.RIB)
    root_rib.placement.set_relative(0.0)
    ribs = structure.add_part(PartType.RIB_ARRAY)
    ribs.spec.start_rel = 0.1
    ribs.spec.spacing_rel = 0.2
    ribs.perpendicular_edge = front.id

    tip_rib = structure.add_part(PartType.RIB)
    tip_rib.placement.set_relative(1.0)
    tip_rib.perpendicular_edge = PERP_LEADING_EDGE

    fix = structure.add_part(PartType.FIX_POINT)
    fix.pos_u, fix.pos_w = 0.8, 0.25
    fix.mass_flag, fix.mass = True, 12.0

    structure.add_subsurface(SubSurfaceType.RECTANGLE)
    return structure


def build_body_structure(shapes: ShapeRegistry) -> Structure:
    structure = Structure(DEMO_BODY_ID, name="Fuselage")
    structure.init_skin(shapes)

    frames = structure.add_part(PartType.SLICE_ARRAY)
    frames.spec.start_rel = 0.1
    frames.spec.spacing_rel = 0.1
    frames.orientation = OrientationSpec(OrientationPlane.CONST_U)

    floor = structure.add_part(PartType.SLICE)
    floor.orientation = OrientationSpec(OrientationPlane.BODY_XY)
    floor.placement.set_relative(0.35)

    dome = structure.add_part(PartType.DOME)
    dome.a_radius, dome.b_radius, dome.c_radius = 0.3, 0.5, 0.6
    dome.x_location = 8.5

    line_array = structure.add_subsurface(SubSurfaceType.LINE_ARRAY)
    line_array.spec.spacing_rel = 0.25
    return structure


def individualize_arrays(structure: Structure) -> None:
    """Replace every array with independent parts."""
    index = 0
    while index < len(structure.parts):
        part = structure.parts[index]
        if part.part_type is PartType.RIB_ARRAY:
            structure.individualize_rib_array(index)
        elif part.part_type is PartType.SLICE_ARRAY:
            structure.individualize_slice_array(index)
        else:
            index += 1
    index = 0
    while index < len(structure.subsurfaces):
        if structure.subsurfaces[index].ss_type is SubSurfaceType.LINE_ARRAY:
            structure.individualize_line_array(index)
        else:
            index += 1


def build_demo(args) -> Tuple[ShapeRegistry, List[Structure]]:
    shapes = build_demo_shapes()
    if args.load:
        structures = [load_structure(path) for path in args.load]
    else:
        structures = [build_wing_structure(shapes), build_body_structure(shapes)]

    for structure in structures:
        structure.update(shapes, half_mesh=args.half_mesh)
        if args.individualize:
            # member counts are only known after an update
            individualize_arrays(structure)
            structure.update(shapes)
    return shapes, structures


def _suffixed(path: Path, structure: Structure, many: bool) -> Path:
    return path.with_name(f"{path.stem}_{structure.name}{path.suffix}") if many else path


def main():
    parser = argparse.ArgumentParser(description="Open-FEA Parts structural layout")
    parser.add_argument("--summary", action="store_true", help="Show configuration and structure summary")
    parser.add_argument("--validate", action="store_true", help="Validate configuration only")
    parser.add_argument("--load", nargs="+", metavar="PATH", help="Load structures saved with --export-json")
    parser.add_argument("--individualize", action="store_true", help="Replace arrays with independent parts")
    parser.add_argument("--half-mesh", action="store_true", help="Mesh only the y >= 0 half")
    parser.add_argument("--export-json", metavar="PATH", type=Path, help="Save structure definitions")
    parser.add_argument("--export-dxf", metavar="PATH", type=Path, help="Write member outlines as DXF")
    parser.add_argument("--export-step", metavar="PATH", type=Path, help="Write member faces as STEP")
    parser.add_argument("--solver-cards", metavar="PATH", type=Path, help="Write property/material cards")
    parser.add_argument(
        "--dialect",
        choices=[d.value for d in SolverDialect],
        default=config.export.default_dialect.value,
        help="Solver card dialect",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    if len(sys.argv) == 1:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    print(f"Open-FEA Parts v{config.version}")

    if args.validate:
        return 0 if validate_config() else 1

    if not validate_config():
        print("\nAborting due to configuration errors.")
        return 1

    shapes, structures = build_demo(args)
    many = len(structures) > 1

    if args.summary:
        print(config.summary())
        for structure in structures:
            print(structure.summary())
            u_sup, w_sup = structure.build_suppress_list()
            print(f"  Suppressed skin lines: u={u_sup} w={w_sup}")
            print(f"  Mesh surfaces: {len(structure.mesh_surfaces())}")

    for structure in structures:
        if args.export_json:
            path = save_structure(structure, _suffixed(args.export_json, structure, many))
            print(f"  JSON: {path}")
        if args.export_dxf:
            path = write_dxf(structure, _suffixed(args.export_dxf, structure, many))
            print(f"  DXF: {path}")
        if args.export_step:
            path = export_step(structure, _suffixed(args.export_step, structure, many))
            print(f"  STEP: {path or 'skipped'}")
        if args.solver_cards:
            path = write_solver_cards(structure, _suffixed(args.solver_cards, structure, many),
                                      SolverDialect(args.dialect))
            print(f"  Cards: {path}")

    print("\nDone.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
