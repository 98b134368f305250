"""
Multiple Testing Correction Example
===================================

This example compares the power to detect several regression effects with
and without multiple comparison corrections.
"""

import simpower

# Example: treatment effect, a baseline covariate and their interaction
# Research question: how much power do corrections cost at n=150?

print("=" * 60)
print("MULTIPLE TESTING CORRECTION EXAMPLE")
print("=" * 60)

coefficients = {"intercept": 1.0, "treatment": 0.5, "baseline": 0.3, "treatment:baseline": 0.2}
predictors = {"treatment": "binary", "baseline": "normal"}
targets = ["treatment", "baseline", "treatment:baseline"]

for correction in [None, "bonferroni", "holm", "benjamini-hochberg"]:
    analysis = simpower.PowerAnalysis.linear_model(
        coefficients,
        predictors,
        target=targets,
        correction=correction,
        require="all",
    )
    estimate = analysis.find_power(sample_size=150)
    print(f"{str(correction):>20}: all three effects detected in {estimate.power:.1%} of trials")

# Overall F-test of the model
overall = simpower.PowerAnalysis.linear_model(coefficients, predictors, target="overall")
print(f"\nOverall F-test power at n=150: {overall.find_power(sample_size=150).power:.3f}")
