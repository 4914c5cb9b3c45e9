import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# --- Application Settings ---
HOST = os.getenv('HOST', '127.0.0.1')
PORT = int(os.getenv('PORT', '21541'))
ALLOWED_ORIGINS = os.getenv('ALLOWED_ORIGINS', 'http://localhost:3000').split(',')

# --- Database ---
DATABASE_PATH = os.getenv('DATABASE_PATH', 'db.sqlite3')

# --- JWT ---
SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'dev-secret-change-me')  # Change this in production!
ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv('JWT_ACCESS_TOKEN_EXPIRE_MINUTES', str(60 * 24 * 7)))  # 7 days
OAUTH_STATE_EXPIRE_MINUTES = 10
OAUTH_COOKIE_SECURE = os.getenv('OAUTH_COOKIE_SECURE', 'false').lower() == 'true'  # Enable behind HTTPS

# --- OAuth Configuration ---
GITHUB_CLIENT_ID = os.getenv('GITHUB_CLIENT_ID')
GITHUB_CLIENT_SECRET = os.getenv('GITHUB_CLIENT_SECRET')
GITHUB_REDIRECT_URI = os.getenv('GITHUB_REDIRECT_URI', f"http://localhost:{PORT}/auth/oauth/github/callback")
GITHUB_SCOPES = ['read:user', 'user:email']

# OAuth URLs
GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_API_URL = "https://api.github.com"

# --- Pagination ---
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# --- Content limits ---
MIN_PASSWORD_LENGTH = 6
MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 10000
MAX_COMMENT_LENGTH = 2000
MAX_TAGS = 10
MAX_TAG_LENGTH = 50

# --- Logging ---
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
