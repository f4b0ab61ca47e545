from prometheus_client import Counter, Gauge

DISPATCH_COUNT = Counter(
    'topic_dispatch_total',
    'Client-facing topic dispatches by event kind and outcome',
    ['kind', 'outcome']
)

PUSH_COUNT = Counter(
    'topic_push_total',
    'Server-originated pushes by outcome',
    ['outcome']
)

PERIODIC_TIMERS = Gauge(
    'topic_periodic_timers',
    'Number of periodic timer jobs currently scheduled'
)
