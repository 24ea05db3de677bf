"""
Demo: detectives exploring crime scenes.

Each agent starts at home knowing nothing. It learns the ground truth of
every cell it steps on and draws conclusions about the neighbors:
- gravel hints at a precipice nearby
- blood and the knife hint at the corpse nearby
- grass and empty cells rule both out

Once it has found both the knife and the body it walks home.
"""

import logging

from sleuth import (
    AgentConfig, DetectiveAgent, generate_world,
    make_blood_trail_case, make_gravel_case,
)


def run_case(title, grid, config):
    print(f"\n--- {title} ---\n")
    print("Ground truth:")
    print(grid.render())
    print()

    agent = DetectiveAgent(grid, grid.home, config)
    result = agent.run(verbose=True)
    print()
    print("What the detective believes:")
    print(agent.knowledge.render())
    print()
    print(result.summary())


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("  Sleuth — Risk-Weighted Exploration")
    print("=" * 60)

    run_case("Case 1: Blood Trail", make_blood_trail_case(),
             AgentConfig(seed=42))

    run_case("Case 2: Gravel Pit (riskiest detective)", make_gravel_case(),
             AgentConfig(seed=42))

    run_case("Case 3: Gravel Pit (distracted detective)", make_gravel_case(),
             AgentConfig(strategy="distracted", seed=42))

    run_case("Case 4: Generated 10x10", generate_world(10, 10, seed=7),
             AgentConfig(strategy="nearest", seed=7))


if __name__ == "__main__":
    main()
