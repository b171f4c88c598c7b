"""
Modello per le transazioni ricorrenti (spese/entrate)

Contiene le informazioni necessarie per pianificare addebiti / accrediti ricorrenti:
- description, amount, transaction_type ('expense' o 'income')
- frequency: 'daily', 'weekly', 'monthly', 'semestrally' o 'yearly'
- start_date / end_date: finestra di validità (millisecondi epoch, estremi inclusi)
- last_processed_date: ultima occorrenza materializzata
- next_due_date: prossima occorrenza da materializzare (None quando disattivata)
- installment_count: numero di rate generate per ogni occorrenza

Il giorno di ancoraggio delle frequenze mensili è il giorno del mese di
start_date e non viene salvato a parte.
"""
from spese import db


class RecurringTransaction(db.Model):
    __tablename__ = 'recurring_transactions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    description = db.Column(db.String(200), nullable=False)
    amount = db.Column(db.Float, nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id'), nullable=False)
    payment_type_id = db.Column(db.Integer, db.ForeignKey('payment_types.id'), nullable=True)
    transaction_type = db.Column(db.String(20), nullable=False)  # 'expense' o 'income'
    frequency = db.Column(db.String(20), nullable=False, default='monthly')
    start_date = db.Column(db.BigInteger, nullable=False)
    end_date = db.Column(db.BigInteger, nullable=True)
    last_processed_date = db.Column(db.BigInteger, nullable=True)
    next_due_date = db.Column(db.BigInteger, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    installment_count = db.Column(db.Integer, nullable=False, default=1)
    softdelete = db.Column(db.Boolean, nullable=False, default=False)
    deleted_at = db.Column(db.BigInteger, nullable=True)

    category = db.relationship('Category', backref=db.backref('recurring_transactions', lazy=True))
    payment_type = db.relationship('PaymentType', backref=db.backref('recurring_transactions', lazy=True))

    __table_args__ = (
        # query dei template scaduti del catch-up
        db.Index('ix_recurring_active_next_due', 'is_active', 'next_due_date'),
        db.Index('ix_recurring_user_active_start', 'user_id', 'is_active', 'start_date'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'description': self.description,
            'amount': self.amount,
            'category_id': self.category_id,
            'payment_type_id': self.payment_type_id,
            'transaction_type': self.transaction_type,
            'frequency': self.frequency,
            'start_date': self.start_date,
            'end_date': self.end_date,
            'last_processed_date': self.last_processed_date,
            'next_due_date': self.next_due_date,
            'is_active': bool(self.is_active),
            'installment_count': self.installment_count,
        }

    def __repr__(self):
        return f"<RecurringTransaction {self.description} ({self.transaction_type}) {self.amount} {self.frequency}>"
