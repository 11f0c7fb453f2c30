import os
import logging

import uvicorn
from dotenv import load_dotenv

load_dotenv()

# Configure logging with environment variable control and validation
log_level = os.getenv("LOG_LEVEL", "INFO").upper()

# Validate log level
valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
if log_level not in valid_levels:
    print(f"⚠️  Warning: Invalid LOG_LEVEL '{log_level}'. Using INFO instead.")
    print(f"Valid levels: {', '.join(valid_levels)}")
    log_level = 'INFO'

logging.basicConfig(
    level=getattr(logging, log_level),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logging.info("🚀 Session auth service starting")
logging.info(f"📊 Log level: {log_level}")

if log_level == 'DEBUG':
    logging.info("🔍 DEBUG logging enabled - request/response and session resolution details active")


def main():
    port = int(os.getenv("PORT", 3000))
    logging.info(f"Tip: check your session via `curl -b cookies.txt http://127.0.0.1:{port}/api/check-session`")
    logging.info(
        f"Tip: log in with `curl -c cookies.txt -H 'Content-Type: application/json' "
        f"-d '{{\"username\":\"juan\",\"password\":\"123456\"}}' http://127.0.0.1:{port}/api/login`"
    )

    if os.getenv("MODE") == "dev":
        logging.info("🛠️  Running in development mode with auto-reload")
        uvicorn.run("service.service:create_app", factory=True, reload=True, log_level="info", port=port)
    else:
        logging.info("🏭 Running in production mode")
        from service.service import create_app
        uvicorn.run(create_app(), host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
