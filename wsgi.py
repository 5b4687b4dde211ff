import os
import sys

from solplan.config import load_environment

# === Detect EC2 vs. Local Environment ===
if os.name == "posix" and os.uname().nodename.startswith("ip-"):
    # Running on EC2
    project_home = '/var/www/solplan'
else:
    # Running locally
    project_home = os.path.abspath(os.path.dirname(__file__))

# === Load .env.local / .env ===
loaded = load_environment(project_home)
if __name__ == "__main__" and loaded:
    print(f"Loaded {loaded.name} from {loaded}")

# === Fallback for critical env variables (e.g., FLASK_KEY) ===
if not os.environ.get("FLASK_KEY"):
    os.environ["FLASK_KEY"] = "fallback-secret-key"
    if __name__ == "__main__":
        print("FLASK_KEY not found. Using fallback.", file=sys.stderr)

# === Import and Launch Flask App ===
from solplan import create_app  # noqa: E402

application = create_app()  # For WSGI/Gunicorn

if __name__ == "__main__":
    print("🔧 Running in standalone mode (development server)")
    print("MAX_SIMULATIONS =", application.config["MAX_SIMULATIONS"])
    application.run(host="0.0.0.0", port=5000)
