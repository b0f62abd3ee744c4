from flask_compress import Compress
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

cors = CORS()
compress = Compress()
limiter = Limiter(key_func=get_remote_address)
