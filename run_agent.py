import argparse
import json
import logging
import os
import sys

from dotenv import load_dotenv

from agent.main import EgressAgent, format_report


def main(argv=None):
    load_dotenv()
    parser = argparse.ArgumentParser(description="Check whether this device's egress is direct, proxied or tunneled.")
    parser.add_argument("--config", default=os.getenv("EGRESS_CONFIG_PATH", "core/config.json"), help="agent JSON config")
    parser.add_argument("--json", action="store_true", help="print the raw evaluation as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    config_path = args.config
    if not os.path.exists(config_path):
        # Fallback for when running from a different folder
        config_path = os.path.join(os.path.dirname(__file__), "core", "config.json")

    result = EgressAgent(config_path).evaluate()

    if args.json:
        payload = result.model_dump(mode="json")
        if result.decision:
            payload["decision"]["method_trace"] = result.decision.method_trace
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(format_report(result))

    return 0 if result.status == "ok" else 2


if __name__ == "__main__":
    sys.exit(main())
