"""Basic usage example for circlefinder."""

import sys

from circlefinder import CircleFinder
from circlefinder.utils.io_handler import load_image, save_image, JSONWriter
from circlefinder.utils.logger import create_session_log_file, setup_logger
from circlefinder.utils.visualization import draw_circles


def main():
    """Find circles in one image and save an overlay plus a JSON report."""
    logger = setup_logger('basic_usage', log_file=create_session_log_file())

    image_path = sys.argv[1] if len(sys.argv) > 1 else "input/im1.png"
    image = load_image(image_path)

    if image is None:
        logger.error(f"Could not load image from {image_path}")
        return

    logger.info("Finding circles...")
    finder = CircleFinder()
    result = finder.find(image, (25, 120), sensitivity=0.95)
    logger.info(f"Found {len(result)} circles")
    for stage, duration in finder.timings.items():
        logger.info(f"  {stage}: {duration:.1f} ms")

    output = draw_circles(image, result.centers, result.radii)
    save_image(output, "output/circles.png")
    JSONWriter.save_results(result.to_dict(), "output/circles.json")
    logger.info("Results saved to output/")


if __name__ == "__main__":
    main()
