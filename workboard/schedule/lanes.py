"""Visual lane assignment for overlapping jobs on one timeline row."""

from workboard.schedule.models import ProjectedJob

LANE_HEIGHT = 18
MIN_ROW_HEIGHT = 24


def _fits(job: ProjectedJob, lane: list[ProjectedJob]) -> bool:
    return all(
        job.start_time >= other.end_time or job.end_time <= other.start_time
        for other in lane
    )


def assign_lanes(jobs: list[ProjectedJob]) -> int:
    """Place each job in the first lane it does not overlap.

    Mutates ``job.lane`` in place and returns the number of lanes used.
    """
    lanes: list[list[ProjectedJob]] = []

    for job in sorted(jobs, key=lambda j: j.start_time):
        for index, lane in enumerate(lanes):
            if _fits(job, lane):
                lane.append(job)
                job.lane = index
                break
        else:
            lanes.append([job])
            job.lane = len(lanes) - 1

    return len(lanes)


def row_height(lane_count: int) -> int:
    """Row height in display units for a row with ``lane_count`` lanes."""
    return max(MIN_ROW_HEIGHT, lane_count * LANE_HEIGHT)
