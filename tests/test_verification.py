from feeflow.verification import VerificationCodeStore, generate_code


class Clock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def test_generated_codes_are_numeric():
    code = generate_code()
    assert len(code) == 6
    assert code.isdigit()


def test_code_is_consumed_on_match():
    store = VerificationCodeStore(clock=Clock())
    store.store('CEC-INV--0001', 500.0, 'Ama Mensah', code='123456')

    assert not store.verify('CEC-INV--0001', '654321')
    assert store.verify('CEC-INV--0001', '123456')
    assert not store.verify('CEC-INV--0001', '123456')


def test_codes_expire():
    clock = Clock()
    store = VerificationCodeStore(clock=clock)
    store.store('CEC-INV--0001', 500.0, 'Ama Mensah', code='123456', ttl=60)
    store.store('CEC-INV--0002', 80.0, 'Yaw Boateng', ttl=600)

    clock.now = 61
    assert store.get('CEC-INV--0001') is None
    assert store.get('CEC-INV--0002').student_name == 'Yaw Boateng'
    assert len(store) == 1
    assert not store.verify('CEC-INV--0001', '123456')


def test_new_code_replaces_old_one():
    store = VerificationCodeStore(clock=Clock())
    store.store('CEC-INV--0001', 500.0, 'Ama Mensah', code='111111')
    store.store('CEC-INV--0001', 500.0, 'Ama Mensah', code='222222')
    assert not store.verify('CEC-INV--0001', '111111')
    assert store.verify('CEC-INV--0001', '222222')
