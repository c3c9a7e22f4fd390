"""Configuration schema for archive extraction."""

from typing import List

from pydantic import BaseModel, Field, ConfigDict, field_validator

from mirror_me.common import LoggingConfig, expand_path_variables

APP_NAME = "mirror-me"


class ExtractionConfig(BaseModel):
    """Configuration for archive extraction."""
    
    model_config = ConfigDict(extra='forbid')
    
    supported_extensions: List[str] = Field(
        default_factory=lambda: [".csv", ".json"],
        description="Archive entry extensions that are decoded and parsed"
    )
    data_dir: str = Field(
        default="${USER_DATA}",
        validate_default=True,
        description="Directory for locally saved output (supports ${VAR} expansion)"
    )
    skip_malformed_entries: bool = Field(
        default=False,
        description="Log and skip entries with malformed content instead of failing the run"
    )

    @field_validator('supported_extensions')
    @classmethod
    def normalize_extensions(cls, v: List[str]) -> List[str]:
        """Lowercase extensions and ensure the leading dot."""
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                raise ValueError("Empty extension in supported_extensions")
            normalized.append(ext if ext.startswith('.') else f".{ext}")
        return normalized

    @field_validator('data_dir')
    @classmethod
    def expand_data_dir(cls, v: str) -> str:
        """Expand ${VAR} in the data directory."""
        return expand_path_variables(v, app_name=APP_NAME)


class RedditFiles(BaseModel):
    """Canonical Reddit export filenames, one per extraction rule."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    gender: str = "account_gender.csv"
    ip_logs: str = "ip_logs.csv"
    comments: str = "comments.csv"
    posts: str = "posts.csv"
    votes: str = "post_votes.csv"
    messages: str = "messages.csv"
    subreddits: str = "subscribed_subreddits.csv"


class InstagramFiles(BaseModel):
    """Canonical Instagram export filenames, one per extraction rule."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    comments: str = "post_comments.json"
    messages: str = "message_1.json"
    posts: str = "posts_1.json"
    likes: str = "liked_posts.json"
    followers: str = "followers.json"
    followings: str = "following.json"
    ads_interests: str = "ads_interests.json"
    your_topics: str = "your_topics.json"
    stories: str = "stories.json"


class ProvidersConfig(BaseModel):
    """Per-provider filename tables."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    reddit: RedditFiles = Field(default_factory=RedditFiles)
    instagram: InstagramFiles = Field(default_factory=InstagramFiles)


class APIConfig(BaseModel):
    """HTTP ingestion server configuration."""

    model_config = ConfigDict(extra='forbid')

    host: str = "127.0.0.1"
    port: int = Field(default=4000, ge=1, le=65535)
    enable_cors: bool = False
    cors_origins: List[str] = Field(default_factory=list)
    max_upload_size_mb: int = Field(default=512, ge=1)


class MirrorMeConfig(BaseModel):
    """Root configuration."""
    
    model_config = ConfigDict(extra='forbid')
    
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    api: APIConfig = Field(default_factory=APIConfig)
