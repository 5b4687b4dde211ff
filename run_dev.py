import sys

from solplan import create_app
from solplan.models import AccumulationInput, ProjectionService


def main():
    print("🧪 Running dev server...")
    app = create_app()

    # ✅ Smoke-check the engine before serving
    result = ProjectionService().project(AccumulationInput(starting_balance=1.0, starting_price=100.0, years=1))
    if result is None:
        print("❌ Engine smoke check failed, see log output")
        sys.exit(1)
    print(f"✅ Engine check passed (1y projection: ${result.final_value_usd:,.2f})")

    app.run(debug=True)

if __name__ == "__main__":
    main()
