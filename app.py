# app.py
"""
Entrypoint da aplicação.

Uso:
  python app.py migrate --db gestao.db
  python app.py inventario add --nome "Ryzen 5 5600" --categoria CPU --quantidade 5 --preco 800
  python app.py pedido criar --cliente "Maria" --item cpu1:1
  python app.py pedido status <ID> Entregues --valor-final 1500
  python app.py financas resumo
"""

from gestao.adapters.cli import main

if __name__ == "__main__":
    main()
