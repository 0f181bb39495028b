"""Top-level package for FinanceFlow.

FinanceFlow is a personal expense tracker served as a Streamlit app. The
primary modules are:

* ``analytics`` – period totals, category breakdowns, trends and insights
* ``navigation`` – the screens and the transitions allowed between them
* ``store`` / ``session`` – application state and the commands that change it
* ``backend`` – SQLite and in-memory persistence behind one interface
* ``screens`` – the Streamlit renderers for each screen

To run the app from the command line you can execute:

```bash
streamlit run financeflow/Home.py
```

or use ``python run_app.py`` from the project root.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
