"""
Command Line Interface for phaseline
Interactive mode for exploring 1D bifurcations.
"""

from typing import Optional

import numpy as np

from .config import AnalysisConfig
from .exceptions import PhaselineError
from .session import AnalysisSession


EXAMPLES = {
    '1': ("Sub-critical pitchfork", "r*x + x**3 - x**5"),
    '2': ("Super-critical pitchfork", "r*x - x**3"),
    '3': ("Saddle-node", "r + x**2"),
    '4': ("Transcritical", "r*x - x**2"),
    '5': ("Imperfect pitchfork", "0.2 + r*x - x**3"),
}


class PhaselineCLI:
    """Interactive command-line interface for bifurcation analysis."""

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.session = AnalysisSession(config)
        self.running = True

    def print_header(self):
        """Print welcome header."""
        print("\n" + "=" * 60)
        print("  phaseline v1.0")
        print("  Equilibria, stability and trajectories of ẋ = f(x, r)")
        print("=" * 60)
        print("\nType 'help' to list the available commands.\n")

    def print_help(self):
        """Print available commands."""
        help_text = """
╔══════════════════════════════════════════════════════════════╗
║                      AVAILABLE COMMANDS                      ║
╠══════════════════════════════════════════════════════════════╣
║  define      - Define a new system ẋ = f(x, r)               ║
║  show        - Show the current system                       ║
║  set         - Set r or x0                                   ║
║  roots       - Equilibria and stability at the current r     ║
║  sweep       - Summary of the root tracks over the r sweep   ║
║  trajectory  - Integrate from the current x0                 ║
║  export      - Write the sweep table to CSV                  ║
║  latex       - LaTeX form of the equation                    ║
║  plot        - Plot phase plot, trajectory, bifurcations     ║
║  examples    - List example systems                          ║
║  clear       - Clear the current system                      ║
║  help        - Show this help                                ║
║  quit        - Exit                                          ║
╚══════════════════════════════════════════════════════════════╝
"""
        print(help_text)

    def print_examples(self):
        """Print example systems."""
        print("\nExample systems:")
        for key, (name, expression) in EXAMPLES.items():
            print(f"  {key}. {name:26s} f = {expression}")
        print("\nType 'define' and enter the number or an expression of your own.")

    def _loaded(self) -> bool:
        if not self.session.is_loaded:
            print("No system defined. Use 'define' first.")
            return False
        return True

    def cmd_define(self):
        """Define a new dynamical system."""
        print("\n--- Define System ---")
        print("Use x as the state, r as the parameter (t optional).")
        print("Example: r*x - x**3\n")

        try:
            text = input("f(x, r) or example number: ").strip()
            heading = None
            if text in EXAMPLES:
                heading, text = EXAMPLES[text]

            print("\nSolving and sweeping r...")
            self.session.load_expression(text, heading=heading)

            print("\n✓ System defined.")
            self._show_system()

        except PhaselineError as e:
            print(f"\n✗ Could not define system: {e}")

    def _show_system(self):
        """Display current system."""
        if not self._loaded():
            return

        system = self.session.system
        print("\n┌─────────────────────────────────────┐")
        print("│         Current System              │")
        print("├─────────────────────────────────────┤")
        if system.heading:
            print(f"│  {system.heading}")
        print(f"│  ẋ = {system.expression}")
        print(f"│  ∂f/∂x = {system.derivative_string}")
        for k, root in enumerate(system.root_expressions):
            print(f"│  x_{k} = {root}")
        props = [p.name for p in system.properties]
        if props:
            print(f"│  Properties: {props}")
        print(f"│  r = {self.session.r:.1f}, x0 = {self.session.x0:.1f}")
        print("└─────────────────────────────────────┘")

    def cmd_show(self):
        """Show current system."""
        self._show_system()

    def cmd_set(self):
        """Set r or x0."""
        if not self._loaded():
            return

        try:
            name = input("Variable (r / x0): ").strip().lower()
            if name not in ('r', 'x0'):
                print("Unknown variable.")
                return
            value = float(input(f"  {name} = ").strip())

            if name == 'r':
                self.session.set_parameter(value)
            else:
                self.session.set_initial_condition(value)
            print(f"✓ r = {self.session.r:.1f}, x0 = {self.session.x0:.1f}")

        except ValueError:
            print("Invalid value. Enter a number.")

    def cmd_roots(self):
        """Show equilibria at the current r."""
        if not self._loaded():
            return

        state = self.session.state
        print(f"\nEquilibria at r = {state.r:.4g}:")
        for k, (root, label) in enumerate(zip(state.roots, state.labels)):
            value = "undefined" if root is None else f"{root:.6g}"
            print(f"  x_{k} = {value:>12s}  ({label})")

    def cmd_sweep(self):
        """Summarize the precomputed root tracks."""
        if not self._loaded():
            return

        grid = self.session.grid
        tracks = self.session.root_tracks
        labels = self.session.stability_tracks

        print(f"\nSweep r ∈ [{grid.r_min}, {grid.r_max}], {grid.size} points, "
              f"{tracks.shape[0]} branches")
        for k in range(tracks.shape[0]):
            defined = ~np.isnan(tracks[k])
            n_stable = int(np.count_nonzero(labels[k] == 'stable'))
            n_unstable = int(np.count_nonzero(labels[k] == 'unstable'))
            print(f"  branch {k}: real at {int(defined.sum())} points, "
                  f"{n_stable} stable, {n_unstable} unstable")

        stats = self.session.get_stats()['sweep']
        print(f"  re-solved points: {stats['repaired_points']}")

    def cmd_trajectory(self):
        """Integrate from the current initial condition."""
        if not self._loaded():
            return

        trajectory = self.session.trajectory
        print(f"\nRK4 from x0 = {trajectory.x0:.4g} at r = {trajectory.r:.4g}: "
              f"{len(trajectory)} samples")
        for i in np.linspace(0, len(trajectory) - 1, 6).astype(int):
            print(f"  t = {trajectory.t[i]:8.3f}   x = {trajectory.x[i]: .6g}")
        if not trajectory.is_finite:
            print("  → the solution diverges within the time span")

    def cmd_export(self):
        """Write the sweep table to a CSV file."""
        if not self._loaded():
            return

        filename = input("Filename (default: sweep.csv): ").strip() or "sweep.csv"
        try:
            self.session.to_dataframe().to_csv(filename, index=False)
            print(f"✓ Sweep written to {filename}")
        except (ImportError, OSError) as e:
            print(f"✗ Export failed: {e}")

    def cmd_latex(self):
        """Show the LaTeX form of the equation."""
        if not self._loaded():
            return

        print("\n--- LaTeX ---")
        print(self.session.to_latex())
        print("-------------")

    def cmd_plot(self):
        """Generate plots."""
        if not self._loaded():
            return

        try:
            from .visualization import PhaseVisualizer
            import matplotlib.pyplot as plt
        except ImportError:
            print("Matplotlib not available. Install with: pip install matplotlib")
            return

        PhaseVisualizer(self.session).plot_all()
        plt.show()

    def cmd_clear(self):
        """Clear current system."""
        self.session = AnalysisSession(self.session.config, provider=self.session.provider)
        print("✓ System cleared.")

    def run(self):
        """Main loop."""
        self.print_header()

        commands = {
            'help': self.print_help,
            'h': self.print_help,
            '?': self.print_help,
            'define': self.cmd_define,
            'd': self.cmd_define,
            'show': self.cmd_show,
            's': self.cmd_show,
            'set': self.cmd_set,
            'roots': self.cmd_roots,
            'r': self.cmd_roots,
            'sweep': self.cmd_sweep,
            'trajectory': self.cmd_trajectory,
            't': self.cmd_trajectory,
            'export': self.cmd_export,
            'latex': self.cmd_latex,
            'l': self.cmd_latex,
            'plot': self.cmd_plot,
            'p': self.cmd_plot,
            'examples': self.print_examples,
            'ex': self.print_examples,
            'clear': self.cmd_clear,
            'quit': lambda: setattr(self, 'running', False),
            'q': lambda: setattr(self, 'running', False),
            'exit': lambda: setattr(self, 'running', False),
        }

        while self.running:
            try:
                cmd = input("\nphaseline> ").strip().lower()

                if not cmd:
                    continue

                if cmd in commands:
                    commands[cmd]()
                else:
                    print(f"Unknown command: '{cmd}'. Type 'help' for help.")

            except KeyboardInterrupt:
                print("\n\nUse 'quit' to exit.")
            except EOFError:
                break

        print("\nBye!")


def main():
    """Entry point for CLI."""
    cli = PhaselineCLI()
    cli.run()


if __name__ == "__main__":
    main()
