"""REST/GraphQL/MCP 표면이 기능 목록과 일치하는지 검사합니다. CI에서 실행합니다.

Usage:
  python scripts/check_capability_parity.py           # 위반 시 exit 1
  python scripts/check_capability_parity.py --list    # 등록된 기능 목록 출력
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from agentcms.contracts.capability_matrix import CAPABILITIES, DRY_RUN_CAPABILITIES
from agentcms.contracts.parity import check_capability_parity
from agentcms.graph.schema import schema
from agentcms.main import app
from agentcms.tools.server import build_tool_handlers


def main() -> int:
    parser = argparse.ArgumentParser(description="Verify protocol capability parity.")
    parser.add_argument("--list", action="store_true", help="Print the capability matrix")
    args = parser.parse_args()

    if args.list:
        for cap in CAPABILITIES:
            flag = " [dryRun]" if cap.id in DRY_RUN_CAPABILITIES else ""
            print(
                f"- {cap.id}{flag}: {cap.rest.method} {cap.rest.path} | "
                f"{cap.graph.operation}.{cap.graph.field} | {cap.tool}"
            )

    violations = check_capability_parity(app, schema, build_tool_handlers())
    if violations:
        print(f"[FAIL] {len(violations)} capability parity violation(s)")
        for violation in violations:
            print(f"  - {violation}")
        return 1

    print(f"[OK] {len(CAPABILITIES)} capabilities bound on REST, GraphQL and MCP")
    return 0


if __name__ == "__main__":
    sys.exit(main())
