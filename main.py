"""
main.py — Bootstrap

1. Load tuning constants
2. Create the pygame host shell
3. Push the steering viewer for a scenario file
4. Run

    python main.py [scenario.toml]
"""

import sys
from pathlib import Path

from core import tuning
from core.app import App
from scenes.steering_scene import SteeringScene


def main(argv: list[str] | None = None):
    argv = sys.argv[1:] if argv is None else argv
    scenario = Path(argv[0]) if argv else Path(__file__).parent / "data" / "scenario.toml"

    tuning.load()
    app = App(title=f"Steering — {scenario.name}")
    app.push_scene(SteeringScene(scenario))
    app.run()


if __name__ == "__main__":
    main()
