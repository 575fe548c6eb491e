# main.py
"""
Main entry point for the galaxy generator.

This script orchestrates the program lifecycle:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Builds the galaxy parameters, scene, parameter panel and window.
4. Runs the render loop until the window is closed.
5. Handles clean shutdown.
"""
import logging
from utils import setup_logging, load_config
import cProfile
import pstats
import io


def main():
    """
    The main function to run the galaxy generator.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config('config.json')
    except Exception as e:
        print(f"FATAL: Could not load config.json. Error: {e}")
        return

    setup_logging(config)

    logging.info("--- Galaxy Generator Starting ---")

    galaxy_params = config.get('galaxy_parameters', {})
    run_params = config.get('run_control', {})
    vis_params = config.get('visualization', {})

    from galaxy import GalaxyParameters
    from scene import GalaxyScene, ElapsedClock
    from controls import ParameterPanel
    from visualization import Visualizer

    # --- Component Initialization ---
    params = GalaxyParameters.from_dict(galaxy_params)
    # The panel snaps the parameters to its steps, so it is built before the
    # first generation.
    panel = ParameterPanel(params, on_regenerate=lambda: scene.regenerate())
    scene = GalaxyScene(params, seed=galaxy_params.get('seed'))
    visualizer = Visualizer(panel, vis_params)

    profiler = cProfile.Profile() if run_params.get('profile', False) else None

    log_throttle = run_params.get('log_throttle_frames', 600)
    max_frames = run_params.get('max_frames', 0)  # 0 runs until the window closes

    clock = ElapsedClock()
    running = True
    frame_num = 0

    if profiler is not None:
        profiler.enable()
    while running:
        elapsed = clock.elapsed()

        visualizer.camera.update()
        scene.update(elapsed)

        # The visualizer's draw method handles window events and returns
        # False when the user quits.
        if not visualizer.draw(scene):
            running = False

        visualizer.tick()
        frame_num += 1

        # Hot loops must throttle logs
        if log_throttle and frame_num % log_throttle == 0:
            logging.info(
                f"Frame {frame_num} | {visualizer.fps:.1f} FPS | "
                f"{scene.point_set.count} stars | elapsed {elapsed:.1f}s"
            )
            logging.debug(
                f"Frame {frame_num} | rotation {scene.rotation_y:.3f} rad | "
                f"camera at {tuple(round(c, 2) for c in visualizer.camera.position)}"
            )

        if max_frames and frame_num >= max_frames:
            logging.info(f"Reached max_frames ({max_frames}). Stopping.")
            running = False

    visualizer.close()
    logging.info("Render loop finished.")

    if profiler is not None:
        profiler.disable()
        logging.info("--- Performance Profile ---")
        s = io.StringIO()
        # Sort by cumulative time spent in the function
        stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
        stats.print_stats(20)
        logging.info(f"\n{s.getvalue()}")

    logging.info("--- Galaxy Generator Shutting Down ---")


if __name__ == "__main__":
    main()
