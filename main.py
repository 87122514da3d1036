# main.py
import time
from datetime import datetime, timedelta, UTC

from pysynced import RecurrenceRule, SyncedScheduler
from pysynced.storage.memory_storage import MemoryWatermarkStore


def make_task(instance: str):
    def sample_task():
        print(f"[{instance}] Executing sample_task at {datetime.now(UTC).isoformat()}")

    return sample_task


if __name__ == "__main__":
    # 1. One shared store stands in for the Redis or SQL backend
    store = MemoryWatermarkStore()

    # 2. Two "application instances" sharing it
    instance_a = SyncedScheduler(store)
    instance_b = SyncedScheduler(store)

    # 3. Both register the same jobs
    run_at = datetime.now(UTC) + timedelta(seconds=2)
    every_minute = RecurrenceRule(second=0)
    for name, scheduler in (("instance-a", instance_a), ("instance-b", instance_b)):
        scheduler.schedule_job("one-off-report", run_at, make_task(name))
        scheduler.schedule_job("minutely-digest", every_minute, make_task(name))
    print(f"Scheduled one-off-report for {run_at.isoformat()} on both instances")

    # 4. Each occurrence prints once, from whichever instance claimed it
    time.sleep(65)

    print(f"\nWatermarks: one-off-report={store.get('one-off-report')}, "
          f"minutely-digest={store.get('minutely-digest')}")

    instance_a.shutdown()
    instance_b.shutdown()
    print("\nDemonstration finished.")
