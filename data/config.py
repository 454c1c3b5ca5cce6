import os

from dotenv import load_dotenv, find_dotenv

load_dotenv(find_dotenv())


config = {
    "server": {
        "host": os.getenv("HOST", "0.0.0.0"),
        "port": int(os.getenv("PORT", "3000")),
    },
    "webhook": {
        "discord_url": os.getenv("DISCORD_WEBHOOK_URL", ""),
    },
    "api": {
        "api_link": os.getenv("API_LINK", "").rstrip("/"),
        "rapid_token": os.getenv("RAPID_TOKEN", ""),
        "timeout": float(os.getenv("API_TIMEOUT", "30")),
        "cookies": os.getenv("YTDLP_COOKIES", ""),
    },
    "logs": {
        "level": os.getenv("LOG_LEVEL", "INFO").upper(),
    },
}
