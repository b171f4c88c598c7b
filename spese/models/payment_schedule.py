"""Modello per le singole rate di una transazione pagata a rate"""
from spese import db


class PaymentSchedule(db.Model):
    __tablename__ = 'payment_schedules'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    transaction_id = db.Column(db.Integer, db.ForeignKey('transactions.id'), nullable=False, index=True)
    payment_type_id = db.Column(db.Integer, db.ForeignKey('payment_types.id'), nullable=False)
    amount = db.Column(db.Float, nullable=False)
    due_date = db.Column(db.BigInteger, nullable=False)
    installment_number = db.Column(db.Integer, nullable=False)  # 1, 2, 3 ...
    total_installments = db.Column(db.Integer, nullable=False)
    softdelete = db.Column(db.Boolean, nullable=False, default=False)

    transaction = db.relationship('Transaction', backref=db.backref('payment_schedules', lazy=True))

    __table_args__ = (
        db.Index('ix_payment_schedules_user_due', 'user_id', 'due_date'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'transaction_id': self.transaction_id,
            'payment_type_id': self.payment_type_id,
            'amount': self.amount,
            'due_date': self.due_date,
            'installment_number': self.installment_number,
            'total_installments': self.total_installments,
        }

    def __repr__(self):
        return f'<PaymentSchedule tx={self.transaction_id} rata {self.installment_number}/{self.total_installments}: {self.amount}>'
