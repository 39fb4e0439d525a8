# lattice_planner/cli.py
"""
Thin command line wrapper.

    lattice-planner generate --model car --resolution 0.2 --out car.mprim
    lattice-planner plan --map warehouse.npz --model car --start 1 1 0 --goal 8 4 1.57
"""
import argparse
import json
import logging
import sys

from lattice_planner.config import PlannerConfig
from lattice_planner.errors import FailureCode, PlannerError
from lattice_planner.types import HeadingSet, State
from lattice_planner.map.io import load_map
from lattice_planner.primitives.table import PrimitiveTable
from lattice_planner.planning.path_finder import PathFinder
from lattice_planner.planning.request import GoalTolerance, PlannerType, PlanningRequest
from lattice_planner.visualization.observers import ExperimentObserver
from lattice_planner.vehicles import ArticulatedModel, CarModel, UnicycleModel

logger = logging.getLogger(__name__)

MODELS = {
    CarModel.MODEL_ID: CarModel,
    ArticulatedModel.MODEL_ID: ArticulatedModel,
    UnicycleModel.MODEL_ID: UnicycleModel,
}

EXIT_OK = 0
EXIT_PLAN_FAILED = 1
EXIT_CONFIG_ERROR = 2


def _pose(values):
    x, y, theta = values
    return State(x, y, theta)


def run_generate(args) -> int:
    vehicle = MODELS[args.model]()
    table = PrimitiveTable.build(vehicle, args.resolution, HeadingSet(args.headings), args.workers)
    table.save(args.out)
    print(json.dumps({"model_id": table.model_id, "resolution_m": table.resolution,
                      "num_headings": table.num_headings, "num_primitives": len(table),
                      "path": args.out}))
    return EXIT_OK


def run_plan(args) -> int:
    grid_map = load_map(args.map)
    config = PlannerConfig(resolution=grid_map.resolution, num_headings=args.headings,
                           epsilon_initial=args.epsilon, debug_mode=args.debug)
    finder = PathFinder(config, cache_dir=args.cache_dir)
    vehicle = MODELS[args.model]()
    finder.register_model(vehicle, table_path=args.table)

    request = PlanningRequest(
        start=_pose(args.start),
        goal=_pose(args.goal),
        model_id=vehicle.model_id,
        grid_map=grid_map,
        time_budget_s=args.budget,
        planner=PlannerType(args.planner),
        tolerance=GoalTolerance(args.xy_tol, args.heading_tol),
    )
    observer = ExperimentObserver() if args.plot else None
    result = finder.find_path(request, observer=observer)
    print(json.dumps(result.to_dict(), indent=2 if args.pretty else None))

    if args.plot:
        from lattice_planner.visualization.plotter import plot_planning_result
        plot_planning_result(grid_map, result, vehicle, observer, save_path=args.plot)
        logger.info("Plot saved to %s", args.plot)

    return EXIT_OK if result.success else EXIT_PLAN_FAILED


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='lattice-planner',
        description='Lattice motion planner for industrial vehicles',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  lattice-planner generate --model car --resolution 0.2 --out tables/car.mprim
  lattice-planner plan --map warehouse.npz --model car --start 1 1 0 --goal 8 4 1.57 --plot out.png
"""
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='INFO level logging')
    sub = parser.add_subparsers(dest='command', required=True)

    gen = sub.add_parser('generate', help='Generate a primitive table file')
    gen.add_argument('--model', '-m', choices=sorted(MODELS), required=True)
    gen.add_argument('--resolution', '-r', type=float, default=0.2, help='Cell size [m] (default: 0.2)')
    gen.add_argument('--headings', type=int, default=16, choices=[4, 8, 16, 32])
    gen.add_argument('--workers', type=int, default=1, help='Threads used to build the table')
    gen.add_argument('--out', '-o', required=True, help='Output .mprim file')
    gen.set_defaults(func=run_generate)

    plan = sub.add_parser('plan', help='Plan a path on a .npz occupancy map')
    plan.add_argument('--map', required=True, help='Map archive (.npz)')
    plan.add_argument('--model', '-m', choices=sorted(MODELS), required=True)
    plan.add_argument('--table', help='Primitive table file (default: build or use --cache-dir)')
    plan.add_argument('--cache-dir', help='Directory used to cache generated tables')
    plan.add_argument('--headings', type=int, default=16, choices=[4, 8, 16, 32])
    plan.add_argument('--start', type=float, nargs=3, metavar=('X', 'Y', 'THETA'), required=True)
    plan.add_argument('--goal', type=float, nargs=3, metavar=('X', 'Y', 'THETA'), required=True)
    plan.add_argument('--planner', choices=[p.value for p in PlannerType],
                      default=PlannerType.ARA_STAR.value)
    plan.add_argument('--budget', type=float, help='Time budget [s] (default: 5.0)')
    plan.add_argument('--epsilon', type=float, default=3.0, help='Initial ARA* inflation')
    plan.add_argument('--xy-tol', type=float, default=0.0, help='Goal position tolerance [m]')
    plan.add_argument('--heading-tol', type=int, default=0, help='Goal heading tolerance [steps]')
    plan.add_argument('--plot', help='Save a plot of the result to this file')
    plan.add_argument('--pretty', action='store_true', help='Indent the JSON output')
    plan.add_argument('--debug', action='store_true', help='Write a debug log under logs/')
    plan.set_defaults(func=run_plan)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    try:
        return args.func(args)
    except PlannerError as e:
        print(json.dumps({"success": False, "failure_code": e.code.value, "message": str(e)}))
        # 坏地图等请求级错误和规划失败同一个退出码
        return EXIT_CONFIG_ERROR if e.code == FailureCode.CONFIG_ERROR else EXIT_PLAN_FAILED


if __name__ == '__main__':
    sys.exit(main())
