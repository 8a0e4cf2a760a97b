from zipper import settings


redis_config = settings.child('REDIS_CONFIG')

REDIS_HOST = redis_config.get('HOST', 'localhost')
REDIS_PORT = int(redis_config.get('PORT', 6379))
REDIS_PASSWORD = redis_config.get_nullable('PASSWORD', None)
REDIS_DB = int(redis_config.get('DB', 0))

# Manifests are stored under ``<KEY_PREFIX><token>``
REDIS_KEY_PREFIX = redis_config.get('KEY_PREFIX', 'zip:')

REDIS_MAX_CONNECTIONS = int(redis_config.get('MAX_CONNECTIONS', 50))
# Idle pooled connections are PINGed before reuse once they've sat this many seconds
REDIS_HEALTH_CHECK_INTERVAL = int(redis_config.get('HEALTH_CHECK_INTERVAL', 1))
REDIS_SOCKET_TIMEOUT = float(redis_config.get('SOCKET_TIMEOUT', 5))


s3_config = settings.child('S3_CONFIG')

S3_ACCESS_KEY = s3_config.get_nullable('ACCESS_KEY', None)
S3_SECRET_KEY = s3_config.get_nullable('SECRET_KEY', None)
S3_SESSION_TOKEN = s3_config.get_nullable('SESSION_TOKEN', None)
S3_BUCKET = s3_config.get('BUCKET', '')
S3_REGION = s3_config.get_nullable('REGION', None)

# Set to talk to an S3-compatible store instead of AWS
S3_ENDPOINT_URL = s3_config.get_nullable('ENDPOINT_URL', None)

S3_MAX_POOL_CONNECTIONS = int(s3_config.get('MAX_POOL_CONNECTIONS', 50))
S3_CONNECT_TIMEOUT = int(s3_config.get('CONNECT_TIMEOUT', 10))
S3_READ_TIMEOUT = int(s3_config.get('READ_TIMEOUT', 60))
