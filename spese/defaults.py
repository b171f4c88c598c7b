"""
Default data values separated from operational configuration.

Questo modulo contiene i valori di 'contenuto' usati dall'app (categorie e tipi
di pagamento proposti a un nuovo utente) che non devono essere miscelati con le
impostazioni operative del runtime (DB, SECRET_KEY, limiti del catch-up, ecc.).
"""

# Categorie predefinite (nome)
CATEGORIE_DEFAULT = [
    'Vivienda',
    'Servicios',
    'Transporte',
    'Alimentación',
    'Seguros y Salud',
    'Deudas',
    'Ropa',
    'Hogar y electrónica',
    'Ocio',
    'Mascotas',
    'Educación',
    'Otras',
]

# Tipi di pagamento predefiniti (nessuno è di credito finché l'utente non
# configura giorno di chiusura e di scadenza)
TIPI_PAGAMENTO_DEFAULT = [
    'Efectivo o Transferencia',
    'Tarjeta 1',
    'Tarjeta 2',
]

# Descrizione usata nella proiezione quando la transazione d'origine di una rata manca
DESCRIZIONE_SCONOSCIUTA = 'Unknown Expense'
