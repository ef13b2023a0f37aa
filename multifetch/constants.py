DEFAULT_MAX_CONCURRENT = 5
DEFAULT_TIMEOUT = 15.0
USER_AGENT = "multifetch/1.0"

# poll loop intervals, seconds
SELECT_TIMEOUT = 0.001
RETRY_SLEEP = 0.0001
IDLE_SLEEP = 0.00001

IDLE_INDEX = -1
