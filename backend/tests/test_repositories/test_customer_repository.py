"""
Unit tests for CustomerRepository
"""
from kamioun.models import Customer
from kamioun.repositories.customer_repository import CustomerRepository


class TestFindConflict:
    """Test CustomerRepository.find_conflict"""

    def test_email_or_phone_in_use(self, db_session, seed):
        repo = CustomerRepository(db_session)

        assert repo.find_conflict(email="amine@example.tn").id == seed.customer.id
        assert repo.find_conflict(telephone="+21620123456").id == seed.customer.id
        assert repo.find_conflict(email="new@example.tn", telephone="+21620123456").id == seed.customer.id

    def test_customer_being_updated_is_ignored(self, db_session, seed):
        repo = CustomerRepository(db_session)

        assert repo.find_conflict(email="amine@example.tn", exclude_id=seed.customer.id) is None

    def test_nothing_to_check(self, db_session, seed):
        assert CustomerRepository(db_session).find_conflict() is None


class TestLookups:
    def test_find_by_telephone_uses_stored_e164(self, db_session, seed):
        repo = CustomerRepository(db_session)

        assert repo.find_by_telephone("+21620123456").id == seed.customer.id
        assert repo.find_by_telephone("20123456") is None

    def test_find_all_lists_every_customer(self, db_session, seed):
        db_session.add(Customer(first_name="Sana", last_name="Trabelsi", email="sana@example.tn",
                                telephone="+21698765432"))
        db_session.commit()

        customers = CustomerRepository(db_session).find_all()

        assert {c.email for c in customers} == {"amine@example.tn", "sana@example.tn"}
