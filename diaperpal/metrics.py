"""Prometheus metrics definitions for diaperpal.

Exposes metrics for:
1. HTTP API metrics (requests, latency, errors)
2. Google Places API client metrics (calls, latency, errors)
3. S3 photo upload metrics
4. Nearby search pipeline metrics (searches, results, degraded lookups)
5. Background job metrics (runs, duration, errors)
"""
from prometheus_client import Counter, Gauge, Histogram

# =============================================================================
# HTTP API METRICS
# =============================================================================

HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

HTTP_REQUESTS_IN_PROGRESS = Gauge(
    "http_requests_in_progress",
    "Number of HTTP requests currently being processed",
    ["method", "endpoint"],
)

HTTP_REQUEST_SIZE_BYTES = Histogram(
    "http_request_size_bytes",
    "HTTP request body size in bytes",
    ["method", "endpoint"],
    buckets=(100, 500, 1000, 5000, 10000, 50000, 100000, 1000000, 5000000),
)

HTTP_RESPONSE_SIZE_BYTES = Histogram(
    "http_response_size_bytes",
    "HTTP response body size in bytes",
    ["method", "endpoint"],
    buckets=(100, 500, 1000, 5000, 10000, 50000, 100000, 500000),
)

# =============================================================================
# GOOGLE PLACES API CLIENT METRICS
# =============================================================================

GOOGLE_PLACES_API_CALLS_TOTAL = Counter(
    "google_places_api_calls_total",
    "Total number of Google Places API calls",
    ["endpoint", "status"],  # status: success, error
)

GOOGLE_PLACES_API_CALL_DURATION_SECONDS = Histogram(
    "google_places_api_call_duration_seconds",
    "Google Places API call latency in seconds",
    ["endpoint"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

GOOGLE_PLACES_API_ERRORS_TOTAL = Counter(
    "google_places_api_errors_total",
    "Total number of Google Places API errors",
    ["endpoint", "error_type"],  # error_type: http_error, api_status, timeout, connection_error
)

# =============================================================================
# S3 PHOTO STORAGE METRICS
# =============================================================================

S3_UPLOADS_TOTAL = Counter(
    "s3_uploads_total",
    "Total number of station photo uploads to S3",
    ["status"],  # status: success, error
)

S3_UPLOAD_DURATION_SECONDS = Histogram(
    "s3_upload_duration_seconds",
    "S3 photo upload latency in seconds",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# =============================================================================
# NEARBY SEARCH METRICS
# =============================================================================

NEARBY_SEARCHES_TOTAL = Counter(
    "nearby_searches_total",
    "Total number of nearby venue searches",
    ["status"],  # status: success, error
)

NEARBY_SEARCH_RESULTS = Histogram(
    "nearby_search_results",
    "Number of venues returned by a nearby search after filtering",
    buckets=(0, 1, 5, 10, 25, 50, 100, 250),
)

RESTROOM_FETCH_DEGRADED_TOTAL = Counter(
    "restroom_fetch_degraded_total",
    "Restroom lookups that failed and were treated as an empty list",
)

# =============================================================================
# VENUE DATA METRICS
# =============================================================================

VENUE_DETAILS_REFRESH_RESULTS = Counter(
    "venue_details_refresh_results_total",
    "Results of venue details refresh operations",
    ["result"],  # result: refreshed, skipped_fresh, skipped_no_place_id, error
)

VENUES_TOTAL = Gauge(
    "venues_total",
    "Number of venues in the store",
)

# =============================================================================
# BACKGROUND JOB METRICS
# =============================================================================

BACKGROUND_JOB_RUNS_TOTAL = Counter(
    "background_job_runs_total",
    "Total number of background job runs",
    ["job_name", "status"],  # status: success, error
)

BACKGROUND_JOB_DURATION_SECONDS = Histogram(
    "background_job_duration_seconds",
    "Background job duration in seconds",
    ["job_name"],
    buckets=(1, 5, 10, 30, 60, 120, 300, 600, 1800),
)

BACKGROUND_JOB_LAST_RUN_TIMESTAMP = Gauge(
    "background_job_last_run_timestamp",
    "Unix timestamp of the last successful background job run",
    ["job_name"],
)
