"""
Modello per le transazioni materializzate

Una transazione è inserita a mano dall'utente oppure generata da una
ricorrenza (``recurring_transaction_id`` valorizzato). Per ogni coppia
(ricorrenza, data) esiste al più una transazione: il vincolo è garantito dal
controllo prima dell'inserimento nel generatore, non da un indice univoco.
"""
from spese import db


class Transaction(db.Model):
    __tablename__ = 'transactions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    description = db.Column(db.String(200), nullable=False)
    amount = db.Column(db.Float, nullable=False)
    # snapshot del nome: non segue le rinomine successive della categoria
    category = db.Column(db.String(100), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id'), nullable=True)
    payment_type_id = db.Column(db.Integer, db.ForeignKey('payment_types.id'), nullable=True)
    transaction_type = db.Column(db.String(20), nullable=False)  # 'expense' o 'income'
    date = db.Column(db.BigInteger, nullable=False)
    # scadenza dell'estratto conto quando il tipo di pagamento è di credito
    due_date = db.Column(db.BigInteger, nullable=True)
    installment_count = db.Column(db.Integer, nullable=False, default=1)
    verified = db.Column(db.Boolean, nullable=False, default=False)
    recurring_transaction_id = db.Column(db.Integer, db.ForeignKey('recurring_transactions.id'), nullable=True)
    softdelete = db.Column(db.Boolean, nullable=False, default=False)
    deleted_at = db.Column(db.BigInteger, nullable=True)

    __table_args__ = (
        db.Index('ix_transactions_recurring_date', 'recurring_transaction_id', 'date'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'description': self.description,
            'amount': self.amount,
            'category': self.category,
            'category_id': self.category_id,
            'payment_type_id': self.payment_type_id,
            'transaction_type': self.transaction_type,
            'date': self.date,
            'due_date': self.due_date,
            'installment_count': self.installment_count,
            'verified': bool(self.verified),
            'recurring_transaction_id': self.recurring_transaction_id,
        }

    def __repr__(self):
        return f'<Transaction {self.description}: {self.amount} ({self.transaction_type})>'
