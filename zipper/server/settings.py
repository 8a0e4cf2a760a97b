from zipper import settings


config = settings.child('SERVER_CONFIG')

ADDRESS = config.get('ADDRESS', '0.0.0.0')
PORT = int(config.get('PORT', 8080))

DEBUG = config.get_bool('DEBUG', True)

XHEADERS = config.get_bool('XHEADERS', False)

CHUNK_SIZE = int(config.get('CHUNK_SIZE', 65536))  # 64KB
