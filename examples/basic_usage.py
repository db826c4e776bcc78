"""
Basic Usage Examples for phaseline v1.0

This file walks through the session API on the classic 1D bifurcations.
"""

import sys
sys.path.insert(0, '..')

import numpy as np

from phaseline import AnalysisSession, create_session, SymbolicProvider


def example_1_pitchfork():
    """
    Example 1: Super-critical pitchfork

    System:
        ẋ = r x - x³
    """
    print("=" * 60)
    print("Example 1: Super-critical Pitchfork")
    print("=" * 60)

    session = create_session("r*x - x**3")

    print("\nSystem Definition:")
    print(session.system)

    print("\nSystem Properties:")
    for prop in session.system.properties:
        print(f"  - {prop.name}")

    print("\nEquilibria:")
    for r in [-1.0, 0.0, 1.0, 4.0]:
        state = session.set_parameter(r)
        pairs = [f"{x:+.4f} ({label})" for x, label in zip(state.roots, state.labels)
                 if x is not None]
        print(f"  r = {r:5.1f}: {', '.join(pairs)}")

    print("\nLaTeX representation:")
    print(f"  {session.to_latex()}")

    return session


def example_2_saddle_node():
    """
    Example 2: Saddle-node, no equilibria for r > 0

    System:
        ẋ = r + x²
    """
    print("\n" + "=" * 60)
    print("Example 2: Saddle-node")
    print("=" * 60)

    session = create_session("r + x**2")
    stats = session.get_stats()['sweep']
    print(f"\n{stats['repaired_points']} of {stats['points']} sweep points were re-solved")

    state = session.set_parameter(1.0)
    print(f"  r = 1.0: roots = {state.roots}, labels = {state.labels}")

    return session


def example_3_trajectories():
    """Example 3: RK4 trajectories converge to the stable branch."""
    print("\n" + "=" * 60)
    print("Example 3: Trajectories")
    print("=" * 60)

    session = AnalysisSession({'integration': {'time_span': 5.0, 'step_size': 0.01}})
    session.load_expression("r*x - x**3")
    session.set_parameter(2.0)

    for x0 in [-3.0, -0.1, 0.1, 3.0]:
        trajectory = session.set_initial_condition(x0).trajectory
        print(f"  x0 = {x0:5.1f} -> x(5) = {trajectory.x[-1]:+.6f}")

    print(f"\n  sqrt(2) = {np.sqrt(2.0):.6f}")
    return session


def example_4_shared_provider():
    """Example 4: Sessions sharing one provider and its re-solve cache."""
    print("\n" + "=" * 60)
    print("Example 4: Shared Provider")
    print("=" * 60)

    provider = SymbolicProvider()
    for expression in ["r + x**2", "r - x**2"]:
        AnalysisSession(provider=provider).load_expression(expression)

    stats = provider.get_stats()
    print(f"\n  solve calls: {stats['solve_calls']}")
    print(f"  cache: {stats['cache']}")


def example_5_visualization():
    """Example 5: Saving the three plots."""
    print("\n" + "=" * 60)
    print("Example 5: Visualization")
    print("=" * 60)

    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    from phaseline.visualization import PhaseVisualizer

    session = create_session("r*x + x**3 - x**5")
    session.set_parameter(-0.2)
    session.set_initial_condition(0.8)

    print("\nGenerating plots...")
    fig, _ = PhaseVisualizer(session).plot_all(save_path='phaseline_plots.png')
    print("  Saved to: phaseline_plots.png")
    plt.close(fig)

    print("\nExporting sweep table...")
    session.to_dataframe().to_csv('sweep.csv', index=False)
    print("  Saved to: sweep.csv")


def main():
    """Run all examples."""
    print("\n" + "=" * 60)
    print("phaseline v1.0 - Examples")
    print("=" * 60)

    example_1_pitchfork()
    example_2_saddle_node()
    example_3_trajectories()
    example_4_shared_provider()
    example_5_visualization()

    print("\n" + "=" * 60)
    print("All examples completed!")
    print("=" * 60)


if __name__ == "__main__":
    main()
