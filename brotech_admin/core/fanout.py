"""
Fan-out helper: run independent store queries concurrently and join them
on an all-complete barrier.
"""

from concurrent.futures import ThreadPoolExecutor

from .config import get_config_value


def fan_out(tasks, max_workers=None):
    """Run every callable in ``tasks`` and return their results in order.

    ``tasks`` may be a list of callables or a dict of name -> callable; the
    result has the same shape. If any task raises, the first failure (in
    task order) is re-raised and no partial results are returned.
    """
    if isinstance(tasks, dict):
        names = list(tasks)
        results = fan_out([tasks[name] for name in names], max_workers)
        return dict(zip(names, results))

    if not tasks:
        return []

    if max_workers is None:
        max_workers = int(get_config_value('FANOUT_MAX_WORKERS', 8))
    workers = max(1, min(max_workers, len(tasks)))

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(task) for task in tasks]
        # result() blocks until each finishes and re-raises its exception
        return [future.result() for future in futures]
