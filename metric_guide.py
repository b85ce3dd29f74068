"""Human-readable definitions of forecast metrics."""

METRIC_GUIDE = [
    {
        "Metric": "Predicted income",
        "Meaning": "Scheduled income for the month after the selected growth or seasonal adjustment.",
        "Formula": "(recurring + one-time income) * income factor",
    },
    {
        "Metric": "Predicted expenses",
        "Meaning": "Scheduled bills plus discretionary transaction spending for the month.",
        "Formula": "recurring bills + one-time bills + transaction spending",
    },
    {
        "Metric": "Predicted savings",
        "Meaning": "What is left of the month's income after expenses; never forecast on its own.",
        "Formula": "Predicted income - Predicted expenses",
    },
    {
        "Metric": "Transaction spending",
        "Meaning": "Actual expense transactions for past months; average of the last 3 complete months with spending for current and future months.",
        "Formula": "mean(monthly expense totals, last 3 non-zero months)",
    },
    {
        "Metric": "Biweekly / weekly multiplier",
        "Meaning": "Average number of payments in a calendar month.",
        "Formula": "26 / 12 and 52 / 12",
    },
    {
        "Metric": "Prorated one-time amount",
        "Meaning": "Share of a dated lump sum that falls inside the month.",
        "Formula": "amount * overlap days / total days (inclusive)",
    },
    {
        "Metric": "Spending trend",
        "Meaning": "Least-squares slope of the trailing 6 months of expense totals.",
        "Formula": "(n*sum(xy) - sum(x)*sum(y)) / (n*sum(x^2) - sum(x)^2)",
    },
    {
        "Metric": "Volatility",
        "Meaning": "Population standard deviation of the trailing monthly expense totals.",
        "Formula": "std(monthly spending, ddof=0)",
    },
    {
        "Metric": "Recent growth rate",
        "Meaning": "Change of the last 3 months against the first 3 of the trailing window.",
        "Formula": "(avg(last 3) - avg(first 3)) / avg(first 3)",
    },
    {
        "Metric": "Seasonal factor",
        "Meaning": "Calendar month's average expense relative to yearly spending spread over 12 months.",
        "Formula": "(month spend / month transactions) / (total spend / 12)",
    },
    {
        "Metric": "Savings rate",
        "Meaning": "Share of projected income kept after projected expenses.",
        "Formula": "(avg savings / avg income) * 100",
    },
    {
        "Metric": "Emergency coverage",
        "Meaning": "How many months of projected expenses the emergency fund would cover.",
        "Formula": "emergency fund / avg monthly expenses",
    },
]
