import uvicorn
from config.env_config import ENVIRONMENT, PORT

# Expose app for Uvicorn
from main import app  # noqa: F401

host = "0.0.0.0"  # Always listen on all interfaces for Docker

if __name__ == "__main__":
    reload_flag = ENVIRONMENT == "Development"
    uvicorn.run("server:app", host=host, port=PORT, reload=reload_flag)
