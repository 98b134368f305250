"""
Sample Size Planning Example
============================

This example sweeps the per-group sample size and reports the smallest size
reaching the target power.
"""

import simpower

print("=" * 60)
print("SAMPLE SIZE PLANNING EXAMPLE")
print("=" * 60)

analysis = simpower.PowerAnalysis.two_sample(mean_a=8, mean_b=7, sd=2)
analysis.set_power(80).set_seed(2137)

# Optional: spread scenarios over worker processes (requires joblib)
analysis.set_parallel(True)

result = analysis.find_sample_size(from_size=10, to_size=150, by=10, progress_callback=simpower.PrintReporter())

print("\n" + result.to_frame().to_string(index=False))

needed = result.first_achieved(analysis.power / 100)
if needed is None:
    print(f"\nTarget power {analysis.power:.0f}% not reached; extend the range.")
else:
    print(f"\nSmallest sample size per group reaching {analysis.power:.0f}% power: {needed}")

# Power as a function of the effect instead of the sample size
print("\nPower by control-group mean (n=40 per group):")
curve = analysis.power_curve("mean_b", [7.8, 7.5, 7.0, 6.5], sample_size=40)
for estimate in curve:
    print(f"  mean_b={estimate.parameter}: {estimate.power:.3f}")
