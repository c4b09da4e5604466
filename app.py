# app.py
"""
Entrypoint da aplicação.

Uso:
  python app.py migrate --db esboost.db
  python app.py params show
  python app.py permits add --user acme --permits 5 --year 2026
  python app.py status --permits 5 --rate 32000
  python app.py status --user acme --emissions-file emissions.csv
"""

from esboost.adapters.cli import main

if __name__ == "__main__":
    main()
