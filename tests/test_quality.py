from transformation.quality import (
    audit_null_values,
    check_duplicate_keys,
    check_value_ranges,
    run_data_quality_checks,
)


def test_null_audit_covers_every_source_column(orders_df):
    audit = audit_null_values(orders_df)
    counts = dict(zip(audit['Column'], audit['Null_Count']))

    assert counts == {
        'Order_ID': 0,
        'Order_Value': 0,
        'Commission_Fee': 1,
        'Delivery_Fee': 1,
        'Payment_Processing_Fee': 0,
        'Order_Date_and_Time': 0,
        'Discounts_and_Offers': 1,
        'Payment_Method': 1,
    }


def test_duplicate_keys(orders_df):
    assert check_duplicate_keys(orders_df)['duplicate_count'] == 0

    df = orders_df.copy()
    df.loc[3, 'Order_ID'] = 2
    result = check_duplicate_keys(df)

    assert result['duplicate_count'] == 2
    assert result['duplicate_keys'] == [[2]]


def test_value_ranges_flag_negative_fees(orders_df):
    df = orders_df.copy()
    df.loc[0, 'Delivery_Fee'] = -5.0

    results = check_value_ranges(df)

    assert results['Delivery_Fee']['invalid_count'] == 1
    assert results['Delivery_Fee']['invalid_examples'] == [-5.0]
    assert results['Order_Value']['invalid_count'] == 0


def test_quality_checks_do_not_modify_data(orders_df):
    before = orders_df.copy()

    results = run_data_quality_checks(orders_df)

    assert results['total_issues'] == 4
    assert results['missing_values']['missing_columns']['Payment_Method'] == 1
    assert orders_df.equals(before)
