from typing import List, Tuple

from syncwatch.core.models.job import JobSnapshot
from syncwatch.core.models.metrics import CounterSample

# (counter name, StreamStat attribute)
STREAM_COUNTERS: Tuple[Tuple[str, str], ...] = (
    ("records.committed", "records_committed"),
    ("records.emitted", "records_emitted"),
    ("bytes.emitted", "bytes_emitted"),
    ("state.emitted", "state_messages_emitted"),
)


def extract_metrics(snapshot: JobSnapshot) -> List[CounterSample]:
    """Counter samples for a finished job.

    One ``attempts.count`` sample, then one sample per reported stream counter
    per attempt. Values from different attempts for the same stream are kept
    as separate samples; summing them is left to the metrics sink.
    """
    samples = [CounterSample(name="attempts.count", value=snapshot.attempt_count)]
    for attempt in sorted(snapshot.attempts, key=lambda a: a.index):
        if attempt.stream_stats is None:
            continue
        for stat in attempt.stream_stats:
            for name, field in STREAM_COUNTERS:
                value = getattr(stat, field)
                if value is not None:
                    samples.append(
                        CounterSample(name=name, value=value, tags={"stream": stat.stream_name})
                    )
    return samples
