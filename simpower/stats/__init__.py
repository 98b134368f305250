"""Data generators and decision rules."""

from . import analytical as analytical
from . import ols as ols
from . import sampling as sampling
from . import ttest as ttest
from .decision import Decision
from .ols import LinearModelTest
from .sampling import GroupedData, RegressionData, TwoSampleData, k_sample_normal, linear_model, two_sample_normal
from .ttest import FixedThresholdTest, OneWayAnova, TwoSampleTTest
