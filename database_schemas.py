# Database schema definitions

USERS_TABLE_SCHEMA = '''
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT UNIQUE,  -- NULL for OAuth-only users without a public email
        name TEXT,
        image TEXT,
        password_hash TEXT,  -- NULL for OAuth-only users
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
'''

ACCOUNTS_TABLE_SCHEMA = '''
    CREATE TABLE IF NOT EXISTS accounts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        type TEXT NOT NULL DEFAULT 'oauth',
        provider TEXT NOT NULL CHECK (provider IN ('credentials', 'github')),
        provider_account_id TEXT NOT NULL,
        access_token TEXT,
        refresh_token TEXT,
        expires_at INTEGER,
        token_type TEXT,
        scope TEXT,
        id_token TEXT,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        UNIQUE(provider, provider_account_id),
        UNIQUE(user_id, provider),
        FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
    )
'''

FORUMS_TABLE_SCHEMA = '''
    CREATE TABLE IF NOT EXISTS forums (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        title TEXT NOT NULL,
        description TEXT NOT NULL,
        tags TEXT NOT NULL DEFAULT '[]',  -- JSON array of tags, insertion order kept
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
    )
'''

COMMENTS_TABLE_SCHEMA = '''
    CREATE TABLE IF NOT EXISTS comments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        forum_id INTEGER NOT NULL,
        user_id INTEGER NOT NULL,
        content TEXT NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (forum_id) REFERENCES forums (id) ON DELETE CASCADE,
        FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
    )
'''

LIKES_TABLE_SCHEMA = '''
    CREATE TABLE IF NOT EXISTS likes (
        forum_id INTEGER NOT NULL,
        user_id INTEGER NOT NULL,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        PRIMARY KEY (forum_id, user_id),
        FOREIGN KEY (forum_id) REFERENCES forums (id) ON DELETE CASCADE,
        FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
    )
'''

FORUMS_CREATED_AT_INDEX = '''
    CREATE INDEX IF NOT EXISTS idx_forums_created_at ON forums (created_at DESC, id DESC)
'''

COMMENTS_FORUM_INDEX = '''
    CREATE INDEX IF NOT EXISTS idx_comments_forum ON comments (forum_id, created_at DESC, id DESC)
'''

ALL_SCHEMAS = [
    USERS_TABLE_SCHEMA,
    ACCOUNTS_TABLE_SCHEMA,
    FORUMS_TABLE_SCHEMA,
    COMMENTS_TABLE_SCHEMA,
    LIKES_TABLE_SCHEMA,
    FORUMS_CREATED_AT_INDEX,
    COMMENTS_FORUM_INDEX,
]
