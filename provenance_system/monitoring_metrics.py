from prometheus_client import Counter, Histogram

URL_PROBES         = Counter("url_probes_total", "URL verification outcomes", ["outcome"])
INTEGRITY_WARNINGS = Counter("integrity_warnings_total", "Citations/edges dropped", ["kind"])
UPSTREAM_REQUESTS  = Counter("upstream_requests_total", "Research provider calls", ["status"])
PIPELINE_LATENCY   = Histogram("pipeline_seconds", "Payload-to-graph latency", ["stage"])
