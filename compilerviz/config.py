import os


class DefaultConfig:
    # one sub-directory per compile session
    SESSION_ROOT = os.path.join(os.getcwd(), "tmp")
    # None -> durations drawn from OS entropy
    DURATION_SEED = None
    CORS_ORIGINS = "*"
    LOG_LEVEL = "INFO"
    MAX_SOURCE_BYTES = 64 * 1024
