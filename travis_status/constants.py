"""Endpoints, timings and names shared across travis_status."""

ORG_URI = "https://api.travis-ci.org"
PRO_URI = "https://api.travis-ci.com"

# Seconds before the first retry; later retries double up to POLL_TIME_MAX.
POLL_TIME_START = 4.0
POLL_TIME_MAX = 60.0

SLUG_CONFIG_NAME = "travis.slug"

ACCEPT_HEADER = "application/vnd.travis-ci.2+json, application/json"

VERSION = "5.0.0"
